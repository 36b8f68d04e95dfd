"""Browser automation for multi-page form journeys."""
from journey_harness.blocks import JourneyContext, StepBlock
from journey_harness.builder import JourneyBuilder
from journey_harness.components import ComponentHelper
from journey_harness.config import HarnessSettings, RunnerConfig, load_settings
from journey_harness.errors import JourneyAssertionError, JourneyStepError, SubmissionError, ToolError
from journey_harness.patterns import JourneyPatterns, PatternDetector
from journey_harness.runner import JourneyRunner

__all__ = [
    "ComponentHelper",
    "HarnessSettings",
    "JourneyAssertionError",
    "JourneyBuilder",
    "JourneyContext",
    "JourneyPatterns",
    "JourneyRunner",
    "JourneyStepError",
    "PatternDetector",
    "RunnerConfig",
    "StepBlock",
    "SubmissionError",
    "ToolError",
    "load_settings",
]
