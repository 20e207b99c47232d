# eventhub/models/__init__.py
# Import every model so Base.metadata knows about all tables.

from .event import Event
from .program_room import ProgramRoom
from .session import Session
from .registration import Registration
from .actor import Actor
from .actor_block import ActorBlock
from .conversation import Conversation, ConversationMember
