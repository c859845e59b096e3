"""HTTP and WebSocket routers."""

from . import admin, applications, jobs, notifications, profiles, realtime, saved_jobs

# /jobs/saved must be registered ahead of /jobs/{id}
ROUTERS = (
    saved_jobs.router,
    jobs.router,
    applications.router,
    profiles.router,
    notifications.router,
    admin.router,
    realtime.router,
)

__all__ = ["ROUTERS"]
