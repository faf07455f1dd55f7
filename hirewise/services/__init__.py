"""Service layer modules."""

from .matching_service import MatchingService, calculate_basic_match_score, get_match_reasons
from .ai_service import AIService
from .resume_service import ResumeService
from .job_board_service import JobBoardRepository
from . import document_service

__all__ = [
    "AIService",
    "JobBoardRepository",
    "MatchingService",
    "ResumeService",
    "calculate_basic_match_score",
    "document_service",
    "get_match_reasons",
]
