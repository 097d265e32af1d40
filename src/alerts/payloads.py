"""Per-kind ``data`` schemas.

Each kind-specific helper builds one of these models from raw measurements,
so bad input fails with a ``ValidationError`` before it reaches the pipeline.
``to_data()`` renders the human-readable mapping stored on the Alert.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.alerts.types import Payload


class SlowQueryData(BaseModel):
    query: str = Field(min_length=1)
    duration_ms: float = Field(ge=0)
    threshold_ms: float = Field(gt=0)

    def to_data(self) -> Payload:
        return {
            "query": self.query,
            "duration": f"{self.duration_ms:.2f}ms",
            "threshold": f"{self.threshold_ms:g}ms",
            "performance_impact": "high",
        }


class HighErrorRateData(BaseModel):
    query: str = Field(min_length=1)
    error_rate: float = Field(ge=0, le=1)
    threshold: float = Field(gt=0, le=1)
    total_queries: int = Field(ge=0)
    error_count: int = Field(ge=0)

    def to_data(self) -> Payload:
        return {
            "query": self.query,
            "error_rate": f"{self.error_rate * 100:.2f}%",
            "threshold": f"{self.threshold * 100:.2f}%",
            "total_queries": self.total_queries,
            "error_count": self.error_count,
        }


class PerformanceDegradationData(BaseModel):
    query: str = Field(min_length=1)
    recent_avg_ms: float = Field(ge=0)
    previous_avg_ms: float = Field(ge=0)
    factor: float = Field(ge=0)

    def to_data(self) -> Payload:
        return {
            "query": self.query,
            "recent_avg": f"{self.recent_avg_ms:.2f}ms",
            "previous_avg": f"{self.previous_avg_ms:.2f}ms",
            "degradation_factor": f"{self.factor:g}x slower",
            "trend": "degrading",
        }


class ConnectionPoolData(BaseModel):
    usage: float = Field(ge=0, le=1)
    threshold: float = Field(gt=0, le=1)
    active_connections: int = Field(ge=0)
    max_connections: int = Field(ge=0)

    def to_data(self) -> Payload:
        return {
            "pool_usage": f"{self.usage * 100:.1f}%",
            "threshold": f"{self.threshold * 100:.1f}%",
            "active_connections": self.active_connections,
            "max_connections": self.max_connections,
        }


class HealthMetrics(BaseModel):
    """Summary figures reported alongside a health-state change."""

    success_rate: float = 0.0
    average_response_time: float = 0.0
    active_alerts: int = 0


class DatabaseHealthData(BaseModel):
    status: str = Field(min_length=1)
    metrics: HealthMetrics = HealthMetrics()

    def to_data(self) -> Payload:
        return {
            "status": self.status,
            "success_rate": f"{self.metrics.success_rate:g}%",
            "avg_response_time": f"{self.metrics.average_response_time:g}ms",
            "active_alerts": self.metrics.active_alerts,
        }


class ConnectionFailedData(BaseModel):
    host: str
    database: str = ""
    error: str = ""
    attempts: int = Field(default=1, ge=1)

    def to_data(self) -> Payload:
        return {
            "host": self.host,
            "database": self.database,
            "error": self.error,
            "attempts": self.attempts,
        }


class DatabaseErrorData(BaseModel):
    operation: str = Field(min_length=1)
    error_type: str = "unknown"
    message: str = ""
    fatal: bool = False

    def to_data(self) -> Payload:
        return {
            "operation": self.operation,
            "error_type": self.error_type,
            "message": self.message,
            "fatal": self.fatal,
        }
