SEND_NUDGE_URL = "/api/v1/send-nudge"
