# /aloa/utils/storage_util.py
import os
import uuid
import cloudinary
import cloudinary.uploader
from flask import current_app, redirect, send_file
from werkzeug.utils import secure_filename

from aloa.utils.errors import ValidationFailed, NotFound

ALLOWED_RECORD_EXTENSIONS = {'jpeg', 'jpg', 'png', 'gif', 'pdf', 'doc', 'docx'}
IMAGE_EXTENSIONS = {'jpeg', 'jpg', 'png', 'gif'}


class RecordFileStorage:
    """Stores health record attachments on local disk or in Cloudinary.

    Each stored file is described by a plain dict kept on the record:
    filename, original_name, mimetype, size, path and storage.
    """

    def __init__(self, app=None):
        self.backend = 'local'
        if app:
            self.init_app(app)

    def init_app(self, app):
        self.backend = app.config.get('FILE_STORAGE_BACKEND', 'local')
        if self.backend == 'cloudinary':
            cloudinary.config(
                cloud_name=app.config.get('CLOUDINARY_CLOUD_NAME'),
                api_key=app.config.get('CLOUDINARY_API_KEY'),
                api_secret=app.config.get('CLOUDINARY_API_SECRET'),
                secure=True
            )
        elif self.backend == 'local':
            os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
        else:
            raise ValueError(f"Unknown FILE_STORAGE_BACKEND '{self.backend}'")

    def validate(self, file):
        """Rejects files with a disallowed extension or above MAX_FILE_SIZE."""
        if not file or not file.filename:
            raise ValidationFailed(errors=[{'field': 'files', 'message': 'No file selected'}])

        extension = self._get_file_extension(file.filename)
        if extension not in ALLOWED_RECORD_EXTENSIONS:
            raise ValidationFailed(errors=[{
                'field': 'files',
                'message': 'Invalid file type. Only JPEG, PNG, GIF, PDF, DOC, and DOCX files are allowed.'
            }])

        if self._get_file_size(file) > current_app.config['MAX_FILE_SIZE']:
            raise ValidationFailed(errors=[{
                'field': 'files',
                'message': f"File '{file.filename}' exceeds the maximum size"
            }])

    def save(self, file, patient_id):
        """Stores an uploaded file and returns its descriptor."""
        extension = self._get_file_extension(file.filename)
        size = self._get_file_size(file)
        stored_name = secure_filename(f"patient_{patient_id}_{uuid.uuid4().hex}.{extension}")

        if self.backend == 'cloudinary':
            resource_type = 'image' if extension in IMAGE_EXTENSIONS else 'raw'
            upload_result = cloudinary.uploader.upload(
                file,
                public_id=f"health_records/{stored_name}",
                resource_type=resource_type,
                tags=[f"patient_{patient_id}"]
            )
            path = upload_result.get('secure_url')
            stored_name = upload_result.get('public_id')
        else:
            path = os.path.join(current_app.config['UPLOAD_FOLDER'], stored_name)
            file.save(path)

        current_app.logger.info(f"Stored health record file '{stored_name}' ({size} bytes) via {self.backend}")
        return {
            'filename': stored_name,
            'original_name': file.filename,
            'mimetype': file.mimetype or 'application/octet-stream',
            'size': size,
            'path': path,
            'storage': self.backend,
        }

    def delete(self, descriptor):
        """Removes a stored file. Raises on failure; callers decide whether to swallow."""
        if descriptor.get('storage') == 'cloudinary':
            extension = self._get_file_extension(descriptor.get('original_name'))
            resource_type = 'image' if extension in IMAGE_EXTENSIONS else 'raw'
            cloudinary.uploader.destroy(descriptor['filename'], resource_type=resource_type)
        elif os.path.exists(descriptor['path']):
            os.remove(descriptor['path'])

    def delete_quietly(self, descriptors):
        """Best-effort removal: errors are logged, never raised."""
        for descriptor in descriptors:
            try:
                self.delete(descriptor)
            except Exception as e:
                current_app.logger.error(f"Error deleting file '{descriptor.get('filename')}': {e}")

    def send(self, descriptor):
        """Builds the download response for a stored file."""
        if descriptor.get('storage') == 'cloudinary':
            return redirect(descriptor['path'])

        if not os.path.exists(descriptor['path']):
            raise NotFound('File not found on server')

        return send_file(
            descriptor['path'],
            mimetype=descriptor['mimetype'],
            as_attachment=True,
            download_name=descriptor['original_name']
        )

    @staticmethod
    def _get_file_extension(filename):
        if not filename or '.' not in filename:
            return None
        return filename.rsplit('.', 1)[1].lower()

    @staticmethod
    def _get_file_size(file):
        file.seek(0, os.SEEK_END)
        size = file.tell()
        file.seek(0)  # Reset file pointer
        return size


record_storage = RecordFileStorage()
