"""Named profiles: alternative vehicle setups the user can switch between."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from carforge.core.events import EventType
from carforge.core.state import ParameterState, StateManager
from carforge.loaders import profile_io
from carforge.loaders.profile_io import ProfileError

logger = logging.getLogger(__name__)


@dataclass
class Profile:
    name: str
    data: ParameterState


def _rounded_copy(state: ParameterState) -> ParameterState:
    return profile_io.profile_dict_to_state(profile_io.state_to_profile_dict(state))


class ProfileManager:
    """Keeps a list of profiles, one of which mirrors the live state.

    The active profile follows every state change.  Switching profiles
    replaces the whole state, so geometry and passenger sync restart
    from the stored values.
    """

    def __init__(self, state_manager: StateManager):
        self.state_manager = state_manager
        self.event_bus = state_manager.event_bus
        self.profiles: list[Profile] = []
        self.active_index = 0

        self.add_profile("Profile 1", state_manager.get_state(), activate=False)
        self._unsubscribe = state_manager.subscribe(self._on_state_changed)

    def __len__(self) -> int:
        return len(self.profiles)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.profiles]

    @property
    def active_profile(self) -> Profile:
        return self.profiles[self.active_index]

    def _on_state_changed(self, state: ParameterState, context: dict) -> None:
        if 0 <= self.active_index < len(self.profiles):
            self.profiles[self.active_index].data = state.copy()

    def add_profile(self, name: Optional[str] = None,
                    data: Optional[ParameterState] = None,
                    activate: bool = True) -> int:
        """Append a rounded copy of *data* (default: the live state)."""
        if data is None:
            data = self.state_manager.get_state()
        profile = Profile(name=name or f"Profile {len(self.profiles) + 1}",
                          data=_rounded_copy(data))
        self.profiles.append(profile)
        index = len(self.profiles) - 1
        self.event_bus.publish(EventType.PROFILE_ADDED, index=index, name=profile.name)
        if activate:
            self.activate(index)
        return index

    def activate(self, index: int) -> None:
        if not 0 <= index < len(self.profiles):
            logger.debug("No profile at index %d", index)
            return
        self.active_index = index
        profile = self.profiles[index]
        self.state_manager.replace_state(profile.data)
        self.event_bus.publish(EventType.PROFILE_ACTIVATED, index=index, name=profile.name)

    def overwrite(self, index: Optional[int] = None) -> None:
        """Store the live state into a profile (the active one by default)."""
        if index is None:
            index = self.active_index
        if not 0 <= index < len(self.profiles):
            logger.debug("No profile at index %d", index)
            return
        self.profiles[index].data = _rounded_copy(self.state_manager.get_state())

    def delete(self, index: int) -> bool:
        """Remove a profile; the last remaining profile is never deleted."""
        if len(self.profiles) <= 1:
            logger.debug("Refusing to delete the only profile")
            return False
        if not 0 <= index < len(self.profiles):
            logger.debug("No profile at index %d", index)
            return False

        removed = self.profiles.pop(index)
        self.event_bus.publish(EventType.PROFILE_REMOVED, index=index, name=removed.name)

        if index < self.active_index:
            self.active_index -= 1
        elif index == self.active_index:
            self.activate(min(self.active_index, len(self.profiles) - 1))
        return True

    def load_profile(self, path) -> int:
        """Add the profile stored at *path* and switch to it.

        Raises ProfileError when the file is not a usable profile; the
        live state is left untouched in that case.
        """
        path = Path(path)
        try:
            state = profile_io.load_profile(path)
        except ProfileError as e:
            logger.warning("Failed to load profile %s: %s", path.name, e)
            raise
        name = path.stem or f"Profile {len(self.profiles) + 1}"
        return self.add_profile(name, state)

    def save_profile(self, directory, index: Optional[int] = None) -> Path:
        """Write a profile to ``<directory>/<slugged-name>.json``."""
        if index is None:
            index = self.active_index
        profile = self.profiles[index]
        path = Path(directory) / profile_io.profile_filename(profile.name)
        return profile_io.save_profile(profile.data, path)
