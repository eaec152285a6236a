"""Backend package for the fair-rate calculator.

Modules grouped by responsibility:
- ppp_store / calculator: PPP factors and the fair-rate conversion
- analytics: per-day view and calculation counters
- sessions: admin login, bearer-token validation, expired-session sweep
- rate_limit: request throttling policies (slowapi)
- email_drafter, llm_*: optional AI drafting of rate-increase emails
- db: MongoDB connection and collection accessors
- routers / main: the FastAPI application
"""
