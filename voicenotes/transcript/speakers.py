"""
Session-scoped speaker identity registry.

The model only ties turns together through a textual label ("Speaker 1"),
and each batch unit is a separate model call. The registry maps whatever
label it sees to one stable Speaker record per session, so the same label
in a later unit resolves to the same speaker id.
"""

import logging
from typing import Iterable, Iterator, Optional

from .errors import SpeakerNameCollisionError
from .models import Speaker, SpeakerSeed


PALETTE = (
    "#ff8a80",
    "#80d8ff",
    "#82b1ff",
    "#b9f6ca",
    "#ffff8d",
    "#ffd180",
    "#ff80ab",
    "#ea80fc",
    "#a7ffeb",
    "#ccff90",
)


def color_for_index(index: int) -> str:
    """Palette color for the index-th created speaker."""
    return PALETTE[index % len(PALETTE)]


class SpeakerRegistry:
    """Maps current display names to Speaker records.

    Ids come from the registry's creation count. Speakers are never removed,
    so ids are reproducible for identical input and never collide.
    """

    def __init__(self, seeds: Optional[Iterable[SpeakerSeed]] = None):
        self._by_name: dict[str, Speaker] = {}
        self._created: list[Speaker] = []
        self._seeds = {seed.display_name: seed for seed in seeds or ()}
        self._logger = logging.getLogger("speakers")

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, label: str) -> bool:
        return label in self._by_name

    def __iter__(self) -> Iterator[Speaker]:
        return iter(self.speakers())

    def speakers(self) -> list[Speaker]:
        """Registered speakers in creation order."""
        return list(self._created)

    def get(self, speaker_id: str) -> Optional[Speaker]:
        for speaker in self._created:
            if speaker.id == speaker_id:
                return speaker
        return None

    def resolve(self, label: str) -> Speaker:
        """
        Return the speaker for an observed label, creating it on first sight.

        Lookup order: registry key, then any speaker whose current display
        name equals the label, then a new record.
        """
        speaker = self._by_name.get(label)
        if speaker is not None:
            return speaker

        for candidate in self._by_name.values():
            if candidate.display_name == label:
                return candidate

        index = len(self._created)
        seed = self._seeds.get(label)
        speaker = Speaker(
            id=f"speaker_{index}",
            display_name=label,
            hints=seed.hints if seed else "",
            color=(seed.color if seed and seed.color else color_for_index(index)),
        )
        self._by_name[label] = speaker
        self._created.append(speaker)
        self._logger.debug(f"Registered {speaker.id} for label {label!r}")
        return speaker

    def rename(self, speaker_id: str, new_name: str) -> bool:
        """
        Rename a speaker in place, keeping its id and color.

        Args:
            speaker_id: Id of the speaker to rename
            new_name: New display name (trimmed)

        Returns:
            True if the speaker was renamed, False for an empty or unchanged name

        Raises:
            KeyError: If no speaker has this id
            SpeakerNameCollisionError: If another speaker already has new_name
        """
        speaker = self.get(speaker_id)
        if speaker is None:
            raise KeyError(speaker_id)

        new_name = new_name.strip()
        if not new_name or new_name == speaker.display_name:
            return False

        holder = self._by_name.get(new_name)
        if holder is None:
            holder = next(
                (s for s in self._by_name.values() if s.display_name == new_name), None
            )
        if holder is not None and holder.id != speaker.id:
            raise SpeakerNameCollisionError(new_name, holder.id)

        old_key = next(key for key, value in self._by_name.items() if value is speaker)
        del self._by_name[old_key]
        self._logger.info(f"Renamed {speaker.id}: {speaker.display_name!r} -> {new_name!r}")
        speaker.display_name = new_name
        self._by_name[new_name] = speaker
        return True
