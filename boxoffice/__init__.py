"""Box office outliers and trending search counters."""
