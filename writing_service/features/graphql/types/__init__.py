"""Strawberry GraphQL types.

- base: page info and the mutation error type
- documents: GoogleDoc and DocVersion
- prompts: Prompt and PromptRun
- activities: BuiltActivity, its step variants, saved versions, and UserActivityState
- timelines: DocTimeline and its points
"""

from writing_service.features.graphql.types.base import (
    MutationError,
    MutationErrorCode,
    PageInfoType,
)

__all__ = ["MutationError", "MutationErrorCode", "PageInfoType"]
