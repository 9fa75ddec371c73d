"""Day Planner: routine plans, reminders and discipline scoring."""
