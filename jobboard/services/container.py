"""Wiring of the orchestration services around one broadcaster."""

from dataclasses import dataclass, field
from typing import Optional

from jobboard.notifications import MessageRenderer, NotificationLedger
from jobboard.realtime import Broadcaster

from .admin import AdminService
from .applications import ApplicationService
from .background import TaskTracker
from .jobs import JobService
from .notifier import Notifier
from .profiles import ProfileService
from .saved_jobs import SavedJobService


@dataclass
class ServiceContainer:
    broadcaster: Broadcaster
    tasks: TaskTracker
    ledger: NotificationLedger
    notifier: Notifier
    jobs: JobService
    applications: ApplicationService
    admin: AdminService
    profiles: ProfileService = field(default_factory=ProfileService)
    saved_jobs: SavedJobService = field(default_factory=SavedJobService)


def build_services(broadcaster: Optional[Broadcaster] = None) -> ServiceContainer:
    """Create the service graph. A fresh Broadcaster is made when none is given."""
    broadcaster = broadcaster or Broadcaster()
    tasks = TaskTracker()
    ledger = NotificationLedger()
    notifier = Notifier(ledger, broadcaster, MessageRenderer())
    jobs = JobService(notifier, tasks)
    return ServiceContainer(
        broadcaster=broadcaster,
        tasks=tasks,
        ledger=ledger,
        notifier=notifier,
        jobs=jobs,
        applications=ApplicationService(notifier),
        admin=AdminService(notifier),
    )
