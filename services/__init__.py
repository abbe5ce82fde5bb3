"""Application services: lead orchestration, notifications, fan-out, views and export."""
