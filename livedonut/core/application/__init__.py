"""Application services for the donut chart."""
