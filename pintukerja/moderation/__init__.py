"""Account moderation: verification and blocking lifecycle.

- ``service``: admin commands (verify, reject, reopen, block, unblock)
- ``gate``: per-request allow/deny decision with distinguished codes
- ``notices``: the banner/page state the client renders
- ``requests``: employer verification request queue
"""
