"""Constants used throughout the bot."""

from enum import Enum


class ParticipantRole(str, Enum):
    """Functional role of a participant."""
    ATTENDEE = "attendee"
    ANGEL = "angel"
    SUPPORTER = "supporter"
    BUDDY = "buddy"
    MENTOR = "mentor"
    MANAGER = "manager"


# Roles that come from roster presets rather than the angel set
SPECIAL_ROLES = (
    ParticipantRole.SUPPORTER,
    ParticipantRole.BUDDY,
    ParticipantRole.MENTOR,
    ParticipantRole.MANAGER,
)

# Built-in presets used before any roster is configured
DEFAULT_SPECIAL_ROLES = {
    ParticipantRole.SUPPORTER: ("엄준서", "박기현"),
    ParticipantRole.BUDDY: ("김지웅", "변상일"),
    ParticipantRole.MENTOR: ("alen", "devin", "len", "kev"),
    ParticipantRole.MANAGER: ("annie",),
}

# Display order, strongest role first
PARTICIPANT_ROLE_ORDER = (
    ParticipantRole.MENTOR,
    ParticipantRole.MANAGER,
    ParticipantRole.ANGEL,
    ParticipantRole.SUPPORTER,
    ParticipantRole.BUDDY,
    ParticipantRole.ATTENDEE,
)

ROLE_LABELS = {
    ParticipantRole.ATTENDEE: ("Member", ""),
    ParticipantRole.ANGEL: ("Angel", "🪽"),
    ParticipantRole.SUPPORTER: ("Supporter", "💪"),
    ParticipantRole.BUDDY: ("Buddy", "🐥"),
    ParticipantRole.MENTOR: ("Mentor", "👑"),
    ParticipantRole.MANAGER: ("Manager", "🧑‍💼"),
}

DEFAULT_BUCKET_TITLE = "Round 1"
MAX_BATCH_SIZE = 120

# Bot commands
CMD_START = "start"
CMD_HELP = "help"
CMD_NEW_EVENT = "new_event"
CMD_EVENTS = "events"

# Callback data prefixes
CB_EVENT = "event"
CB_BUCKET = "bucket"
CB_PARTICIPANT = "participant"
CB_SETTLE = "settle"
CB_CONFIRM = "confirm"
CB_CANCEL = "cancel"

# Reply keyboard buttons
BTN_NEW_EVENT = "📝 New event"
BTN_EVENTS = "📋 Events"
BTN_HELP = "ℹ️ Help"
BTN_CANCEL = "❌ Cancel"
BTN_SKIP = "⏭ Skip"

# Messages
MSG_WELCOME = """
👋 Hi! I keep track of who came to an event and who has settled up afterwards.

I can:
• Create events and settlement rounds
• Add participants in bulk from a pasted list of names
• Track paid / unpaid status per round

Use /help to see the commands.
"""

MSG_HELP = """
📖 <b>Commands:</b>

/new_event - create an event
/events - list events
/help - show this message

Open an event to manage its settlement rounds, add names and mark payments.
"""

# Error messages
ERR_NO_EVENT = "❌ Event not found"
ERR_NO_PERMISSION = "❌ You are not allowed to do this"
ERR_LAST_BUCKET = "At least one settlement bucket is required."
ERR_NO_NAMES = "❌ No names found in the message"
