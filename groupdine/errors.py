"""
Error taxonomy for the recommendation pipeline.

Every stage raises one of the typed errors below. The pipeline driver
converts them into a user-safe message; raw exception text is only logged.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    # search
    NO_RESULTS = "NO_RESULTS"
    INVALID_LOCATION = "INVALID_LOCATION"
    SEARCH_FAILED = "SEARCH_FAILED"

    # provider api
    API_LIMIT_EXCEEDED = "API_LIMIT_EXCEEDED"
    API_UNAVAILABLE = "API_UNAVAILABLE"
    INVALID_API_RESPONSE = "INVALID_API_RESPONSE"

    # filtering
    NO_QUALIFIED_RESTAURANTS = "NO_QUALIFIED_RESTAURANTS"

    # ai
    AI_ANALYSIS_FAILED = "AI_ANALYSIS_FAILED"
    AI_TIMEOUT = "AI_TIMEOUT"

    # data
    CACHE_ERROR = "CACHE_ERROR"
    DATA_FETCH_ERROR = "DATA_FETCH_ERROR"

    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.NO_RESULTS: "条件に合うお店が見つかりませんでした。場所や料理ジャンルを変更してお試しください。",
    ErrorCode.INVALID_LOCATION: "指定された場所を特定できませんでした。場所の入力内容を見直してください。",
    ErrorCode.SEARCH_FAILED: "検索サービスが混み合っています。しばらくしてから再度お試しください。",
    ErrorCode.API_LIMIT_EXCEEDED: "サービスが混雑しています。しばらく時間をおいてからお試しください。",
    ErrorCode.API_UNAVAILABLE: "現在サービスを利用できません。しばらくしてから再度お試しください。",
    ErrorCode.INVALID_API_RESPONSE: "処理中にエラーが発生しました。もう一度お試しください。",
    ErrorCode.NO_QUALIFIED_RESTAURANTS: "条件に合う評価の高いレストランが見つかりませんでした。評価の基準を少し下げてみてください。",
    ErrorCode.AI_ANALYSIS_FAILED: "AI分析でエラーが発生しました。もう一度お試しください。",
    ErrorCode.AI_TIMEOUT: "AIが混み合っています。しばらくしてから再度お試しください。",
    ErrorCode.CACHE_ERROR: "データの取得に失敗しました。もう一度お試しください。",
    ErrorCode.DATA_FETCH_ERROR: "詳細情報の取得に失敗しました。もう一度お試しください。",
    ErrorCode.UNKNOWN: "予期しないエラーが発生しました。もう一度お試しください。",
    ErrorCode.VALIDATION_ERROR: "入力内容に誤りがあります。内容を確認してください。",
}


class RecommendationError(Exception):
    code: ErrorCode = ErrorCode.UNKNOWN
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        user_message: str | None = None,
        retry_after: float | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.user_message = user_message or USER_MESSAGES[self.code]
        self.retry_after = retry_after
        self.context = context or {}


# Reserved: an empty search is returned as an empty list, never raised
class NoResultsError(RecommendationError):
    code = ErrorCode.NO_RESULTS


class InvalidLocationError(RecommendationError):
    code = ErrorCode.INVALID_LOCATION


class SearchFailedError(RecommendationError):
    code = ErrorCode.SEARCH_FAILED
    retryable = True


class APIUnavailableError(RecommendationError):
    code = ErrorCode.API_UNAVAILABLE
    retryable = True


class APILimitError(RecommendationError):
    code = ErrorCode.API_LIMIT_EXCEEDED
    retryable = True


class InvalidAPIResponseError(RecommendationError):
    code = ErrorCode.INVALID_API_RESPONSE


class NoQualifiedRestaurantsError(RecommendationError):
    code = ErrorCode.NO_QUALIFIED_RESTAURANTS


class AIAnalysisError(RecommendationError):
    code = ErrorCode.AI_ANALYSIS_FAILED
    retryable = True


class AITimeoutError(RecommendationError):
    code = ErrorCode.AI_TIMEOUT
    retryable = True


class CacheError(RecommendationError):
    code = ErrorCode.CACHE_ERROR


class DataFetchError(RecommendationError):
    code = ErrorCode.DATA_FETCH_ERROR
    retryable = True


class ValidationError(RecommendationError):
    code = ErrorCode.VALIDATION_ERROR
