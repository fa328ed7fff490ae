"""
Integration tests for retryable-http.

Test the client end to end against a real local HTTP server:
- Status code table (redirect loop, 429, 404, 500, 200)
- Contexts with and without attempt metadata
- Elapsed time bound with unbounded attempts
- Request body replay across attempts
"""
