# eventhub/crud/__init__.py

from .crud_actor import actor, actor_block, conversation
from .crud_capacity import event_capacity, session_capacity
from .crud_event import event
from .crud_registration import registration
from .crud_session import session, program_room
