"""Directory Service - Requester profile lookups with a read-through cache

Reviewer views join requests to requester profiles. The join happens here,
behind an explicit dependency, instead of in shared module state.
"""
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..domain.models import RequesterProfile
from ..domain.errors import ProfileNotFoundError
from ..repositories.profile_repo import ProfileRepository, MongoProfileRepository
from ..config.settings import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)


class DirectoryService:
    """
    Read-through cache over the profile repository

    Hits are served from memory until their TTL expires; misses always go to
    the repository so a newly created profile shows up on the next read.
    """

    def __init__(
        self,
        profile_repo: Optional[ProfileRepository] = None,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.profile_repo = profile_repo or MongoProfileRepository()
        self.ttl_seconds = settings.directory_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._cache: Dict[str, Tuple[float, RequesterProfile]] = {}
        self._lock = threading.Lock()

    def find_profile(self, user_id: str) -> Optional[RequesterProfile]:
        """Cached lookup; None if the directory does not know the user"""
        now = self._clock()
        with self._lock:
            cached = self._cache.get(user_id)
            if cached and cached[0] > now:
                return cached[1]

        profile = self.profile_repo.get_profile(user_id)
        if profile is not None:
            self._store(profile, now)
        return profile

    def get_profile(self, user_id: str) -> RequesterProfile:
        """Lookup that raises for unknown users"""
        profile = self.find_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError(
                f"No profile found for user {user_id}",
                details={"user_id": user_id}
            )
        return profile

    def resolve_many(self, user_ids: Iterable[str]) -> Dict[str, RequesterProfile]:
        """Resolve a batch of user IDs, refreshing the whole cache at most once"""
        wanted = set(user_ids)
        now = self._clock()
        with self._lock:
            found = {
                uid: entry[1] for uid, entry in self._cache.items()
                if uid in wanted and entry[0] > now
            }

        missing = wanted - found.keys()
        if missing:
            logger.debug(f"Directory cache miss for {len(missing)} users, refreshing")
            for profile in self.list_profiles():
                if profile.user_id in missing:
                    found[profile.user_id] = profile

        return {uid: found.get(uid) or RequesterProfile(user_id=uid) for uid in wanted}

    def list_profiles(self) -> List[RequesterProfile]:
        """Load every profile from the repository and refresh the cache"""
        profiles = self.profile_repo.list_profiles()
        now = self._clock()
        for profile in profiles:
            self._store(profile, now)
        return profiles

    def _store(self, profile: RequesterProfile, now: float) -> None:
        with self._lock:
            self._cache[profile.user_id] = (now + self.ttl_seconds, profile)
