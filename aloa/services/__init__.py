# /aloa/services/__init__.py
from aloa.utils.errors import DomainConflict


def check_transition(label, transitions, current, new):
    """Validates a status change against a transition table.

    Returns False when new equals current (nothing to do), True when the
    change is allowed, and raises DomainConflict otherwise.
    """
    if new == current:
        return False
    if new not in transitions.get(current, set()):
        raise DomainConflict(f"Cannot change status of a {current} {label} to {new}")
    return True
