PROCESS_CHECKPOINTS_URL = "/api/v1/process-checkpoints"
