"""Application bootstrap helpers for the Review Scheduler project."""

from .runtime import SchedulerRuntime, build_runtime, run_report
from .settings import AppSettings

__all__ = ["run_report", "build_runtime", "SchedulerRuntime", "AppSettings"]
