"""
Use cases for the V-Cards API.

Each service module orchestrates repositories and domain rules (sign up,
issue an admin OTP, create or update a card, render or export it). Routers
call these services instead of talking to the database.
"""
