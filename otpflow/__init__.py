"""Signup OTP verification flow: state machine, backend collaborators, HTTP triggers."""
