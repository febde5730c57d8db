"""Activities feature: builder activities, their steps, and user progress."""
