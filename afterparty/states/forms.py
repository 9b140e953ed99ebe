"""FSM states for multi-step forms."""

from aiogram.fsm.state import State, StatesGroup


class EventForm(StatesGroup):
    """States for creating an event."""
    title = State()
    event_date = State()
    start_time = State()
    location = State()
    settlement = State()  # "manager / account" or skip


class BucketForm(StatesGroup):
    """States for creating or editing a settlement round."""
    title = State()
    settlement = State()


class ParticipantForm(StatesGroup):
    """States for adding participants."""
    names = State()  # free-text block of names
