"""Check-in analysis context window data structure."""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


def format_number(value: float) -> str:
    """80.5 -> '80.5', 80.0 -> '80'; no other rounding."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_delta(current: float, previous: float) -> str:
    delta = round(current - previous, 2)
    text = format_number(delta)
    return text if delta < 0 else f"+{text}"


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


@dataclass
class CheckInContextWindow:
    """Everything the analysis prompt needs about one check-in."""

    user_id: str
    challenge_id: str
    week_number: int

    # Prompt framing
    subject_name: str
    challenge_name: str
    duration_weeks: int

    # Current week's metrics
    weight: Optional[float] = None
    measurements: Optional[Dict[str, float]] = None
    mood: Optional[str] = None
    sleep_hours: Optional[float] = None
    energy_level: Optional[int] = None
    notes: Optional[str] = None

    # Prior weeks, most recent first: {"week_number", "weight", "measurements"}
    previous_checkins: List[Dict[str, Any]] = field(default_factory=list)

    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_llm_messages(self, system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
        """Convert context window to LLM-ready messages."""
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]

    def format_current_checkin(self) -> str:
        """Render the present fields of the current week, one per line."""
        lines = []
        if _present(self.weight):
            lines.append(f"Weight: {format_number(self.weight)}kg")
        measurement_lines = [
            f"- {name}: {format_number(value)}cm"
            for name, value in (self.measurements or {}).items()
            if _present(value)
        ]
        if measurement_lines:
            lines.append("Measurements:")
            lines.extend(measurement_lines)
        if _present(self.mood):
            lines.append(f"Mood: {self.mood}")
        if _present(self.sleep_hours):
            lines.append(f"Sleep: {format_number(self.sleep_hours)} hours")
        if _present(self.energy_level):
            lines.append(f"Energy Level: {self.energy_level}/10")
        if _present(self.notes):
            lines.append(f"Notes: {self.notes}")
        return "\n".join(lines)

    def format_previous_checkins(self) -> str:
        """Render prior weeks as bullets, each with its change to the current week."""
        if not self.previous_checkins:
            return "No previous check-ins available"

        current_measurements = self.measurements or {}
        blocks = []
        for previous in self.previous_checkins:
            lines = [f"Week {previous['week_number']}:"]

            weight = previous.get("weight")
            if _present(weight):
                line = f"- Weight: {format_number(weight)}kg"
                if _present(self.weight):
                    line += f" (change to current: {format_delta(self.weight, weight)}kg)"
                lines.append(line)

            for name, value in (previous.get("measurements") or {}).items():
                if not _present(value):
                    continue
                line = f"- {name}: {format_number(value)}cm"
                if _present(current_measurements.get(name)):
                    line += f" (change to current: {format_delta(current_measurements[name], value)}cm)"
                lines.append(line)

            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    def estimate_tokens(self) -> int:
        """Rough estimate of token count for context management."""
        total_chars = len(self.format_current_checkin()) + len(self.format_previous_checkins())
        total_chars += len(self.subject_name or "") + len(self.challenge_name or "")
        return total_chars // 4
