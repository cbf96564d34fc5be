from enum import Enum


class TableNames(str, Enum):
    USERS = "users"
    EVENTS = "events"
    BLOCKS = "blocks"
    QUESTIONS = "questions"
    GUESTS = "guests"
    RSVPS = "rsvps"
    ANSWERS = "answers"
    CHECKPOINTS = "checkpoints"
    NUDGES = "nudges"
    SUBSCRIPTIONS = "subscriptions"
    EVENT_PURCHASES = "event_purchases"
