import json
import logging
from typing import Optional, Any, Dict

audit_logger = logging.getLogger('booking.audit')


def _actor(principal) -> str:
    if principal is None:
        return 'anonymous'
    return str(getattr(principal, 'pk', None) or 'anonymous')


def log_action(*, principal=None, action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    event = {
        'actor': _actor(principal),
        'action': action,
        'objectType': object_type,
        'objectId': object_id,
        'detail': detail or {},
    }
    audit_logger.info('%s', json.dumps(event, sort_keys=True, default=str))
    return event
