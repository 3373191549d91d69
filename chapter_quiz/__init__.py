"""Chapter-based multiple-choice quiz bot."""
