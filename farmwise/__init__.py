"""
FarmWise — A Gamified Community Platform for Sustainable Farming
=================================================================
Farmers, students and dealers verify their contact details, join
sustainability challenges, earn points, levels and badges, and compare
progress on leaderboards and in a community feed.

Package layout::

    farmwise/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Leveling formula, award amounts
    ├── errors.py          # Typed failure reasons → HTTP statuses
    ├── setup_db.py        # python -m farmwise.setup_db
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine, CAS retry, async helper
    │   ├── models.py      # ORM models (6 tables)
    │   └── seed.py        # Demo accounts + challenges
    ├── engine/
    │   ├── clock.py       # UTC helpers
    │   ├── ledger.py      # Points / level / wallet rules
    │   ├── otp.py         # One-time codes
    │   └── challenges.py  # Join / submit state machine + eligibility
    ├── services/
    │   ├── account_service.py       # Register, login, profile
    │   ├── verification_service.py  # Email / phone OTP flows
    │   ├── challenge_service.py     # Listing, join, submit
    │   ├── leaderboard_service.py   # Rankings
    │   ├── reward_service.py        # Wallet read models
    │   ├── community_service.py     # Community feed
    │   ├── admin_service.py         # Dashboard counters, user directory
    │   └── notification_service.py  # SMTP + Twilio SMS
    └── api/
        ├── main.py        # FastAPI app
        ├── auth.py        # Register / login / OTP → JWT
        └── routes/        # Users, challenges, leaderboard, rewards, community, admin
"""

__version__ = "0.1.0"
