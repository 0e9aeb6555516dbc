"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .attestation import InputEventIn, ScorePayloadSchema, VerifyRunRequest, VerifyRunResponse
from .heartbeat import HeartbeatReceipt, HeartbeatRequest
from .leaderboard import LeaderboardEntryResponse, PlayerStatsResponse
from .run import RunResponse, RunStart, ScoreSubmission, ScoreSubmissionResponse
from .session import SessionCreate, SessionResponse

__all__ = [
    "HeartbeatReceipt", "HeartbeatRequest",
    "InputEventIn", "ScorePayloadSchema", "VerifyRunRequest", "VerifyRunResponse",
    "LeaderboardEntryResponse", "PlayerStatsResponse",
    "RunResponse", "RunStart", "ScoreSubmission", "ScoreSubmissionResponse",
    "SessionCreate", "SessionResponse",
]
