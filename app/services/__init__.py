"""Service layer: encoding, prompts, remote calls and kit orchestration."""
