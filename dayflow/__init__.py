"""Dayflow - gamification and streak engine for a daily task and habit tracker."""
