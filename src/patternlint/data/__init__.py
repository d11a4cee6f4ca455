"""Default rule files bundled with patternlint."""
