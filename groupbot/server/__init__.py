"""HTTP transport: FastAPI app serving Slack webhooks and a health check."""
