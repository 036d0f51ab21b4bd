"""
Change notification for pet resources

Observers register against a resource identifier and are called
after a write that changed at least one row:
- A write to pets/<id> notifies observers of pets/<id> and
  observers of pets (when registered for descendants)
- A write to pets notifies observers of pets and of every item

Delivery runs on a thread pool. notify_change() never waits for
observers, and an observer that raises is logged and skipped.
"""
import logging
import threading
import itertools
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set

import router
from config import NOTIFIER_MAX_WORKERS
from schema import ChangeEvent, ChangeType, create_change_event

logger = logging.getLogger(__name__)

Observer = Callable[[ChangeEvent], None]


@dataclass(frozen=True)
class Registration:
  """Handle returned by register_observer"""
  token: int
  uri: str
  callback: Observer
  notify_for_descendants: bool = True


def should_notify(registration: Registration, changed_uri: str) -> bool:
  """Determine if a change to changed_uri reaches this observer"""
  if registration.uri == changed_uri:
    return True

  observed = router.match(registration.uri)
  changed = router.match(changed_uri)

  # Collection observer, item change
  if isinstance(observed, router.Collection) and isinstance(changed, router.Item):
    return registration.notify_for_descendants

  # Item observer, collection change
  if isinstance(observed, router.Item) and isinstance(changed, router.Collection):
    return True

  return False


class ChangeNotifier:
  """Publish/subscribe hub for resource changes"""

  def __init__(self, max_workers: int = NOTIFIER_MAX_WORKERS):
    self._executor = ThreadPoolExecutor(
      max_workers=max_workers, thread_name_prefix="pet-notifier"
    )
    self._lock = threading.Lock()
    self._registrations: Dict[int, Registration] = {}
    self._pending: Set = set()
    self._tokens = itertools.count(1)
    self._closed = False

  def register_observer(
    self,
    uri: str,
    callback: Observer,
    notify_for_descendants: bool = True
  ) -> Registration:
    """Subscribe callback to changes on uri"""
    registration = Registration(
      token=next(self._tokens),
      uri=router.canonical(uri),
      callback=callback,
      notify_for_descendants=notify_for_descendants,
    )
    with self._lock:
      self._registrations[registration.token] = registration
    logger.debug(f"Observer {registration.token} registered on {registration.uri}")
    return registration

  def unregister_observer(self, registration: Registration) -> bool:
    """Remove a subscription. Returns False if it was not registered."""
    with self._lock:
      removed = self._registrations.pop(registration.token, None)
    return removed is not None

  def observers_for(self, uri: str) -> List[Registration]:
    """Registrations a change to uri would reach"""
    changed_uri = router.canonical(uri)
    with self._lock:
      registrations = list(self._registrations.values())
    return [r for r in registrations if should_notify(r, changed_uri)]

  def notify_change(
    self,
    uri: str,
    change_type: ChangeType,
    rows_affected: int
  ) -> Optional[ChangeEvent]:
    """
    Publish a change. Returns the event, or None when nothing changed.
    Returns before any observer has run.
    """
    if rows_affected <= 0:
      return None

    event = create_change_event(router.canonical(uri), change_type, rows_affected)
    targets = self.observers_for(event.uri)

    for registration in targets:
      self._submit(registration, event)

    if targets:
      logger.info(f"📢 {event.summary} -> {len(targets)} observer(s)")
    return event

  def _submit(self, registration: Registration, event: ChangeEvent):
    with self._lock:
      if self._closed:
        logger.warning(f"⚠️ Notifier closed, dropping {event.summary}")
        return
      future = self._executor.submit(self._deliver, registration, event)
      self._pending.add(future)
    future.add_done_callback(self._forget)

  def _forget(self, future):
    with self._lock:
      self._pending.discard(future)

  @staticmethod
  def _deliver(registration: Registration, event: ChangeEvent):
    try:
      registration.callback(event)
    except Exception:
      logger.warning(
        f"⚠️ Observer {registration.token} on {registration.uri} failed for {event.summary}",
        exc_info=True
      )

  def join(self, timeout: Optional[float] = None) -> bool:
    """Wait for in-flight deliveries. Returns True if all finished."""
    with self._lock:
      pending = list(self._pending)
    if not pending:
      return True
    _, not_done = wait(pending, timeout=timeout)
    return not not_done

  def close(self, wait_for_pending: bool = True):
    """Stop accepting notifications and shut the delivery pool"""
    with self._lock:
      self._closed = True
    self._executor.shutdown(wait=wait_for_pending)
