"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Send a prompt plus an output schema and parse the JSON reply.
- Bound every call with a timeout and a retry budget with backoff.
- Treat empty or malformed output as "no result" rather than a crash.
"""
