EVENT_USAGE_URL = "/api/v1/events/{event_id}/usage"
CHECK_LIMIT_URL = "/api/v1/events/{event_id}/limits/{limit_type}"
CAN_CREATE_EVENT_URL = "/api/v1/users/{user_id}/can-create-event"
