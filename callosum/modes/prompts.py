"""Prompt templates shared by the mode executors.

Every prompt the orchestration core sends to an agent is built here, so the
wording of a protocol can change without touching its control flow.
"""

from __future__ import annotations

from callosum.models import Character, RoleplayMessage

UNAVAILABLE = "[No response available]"

AGENT_ROLES = {
    "alpha": "analytical",
    "beta": "creative",
}


class PromptBuilder:
    """Builds the prompts for all interaction protocols."""

    def sequential_context(self, message: str, first_agent: str, content: str) -> str:
        return f"{message}\n\nContext from {first_agent}: {content}"

    def debate_challenge(self, message: str, position: str) -> str:
        return (
            f'Original question: "{message}"\n\n'
            f"The other perspective argued:\n{position}\n\n"
            "Challenge this position. Point out weaknesses, missing angles and "
            "alternative interpretations. Be specific and constructive."
        )

    def debate_refine(self, message: str, previous: str, challenge: str) -> str:
        return (
            f'Original question: "{message}"\n\n'
            f"Your previous position:\n{previous}\n\n"
            f"The challenge raised against it:\n{challenge}\n\n"
            "Refine your position. Address the valid points of the challenge "
            "and keep what still holds."
        )

    def synthesis(self, message: str, alpha: str | None, beta: str | None) -> str:
        return (
            f'Original question: "{message}"\n\n'
            f"Analytical perspective (Alpha):\n{alpha or UNAVAILABLE}\n\n"
            f"Creative perspective (Beta):\n{beta or UNAVAILABLE}\n\n"
            "Synthesize both perspectives into one unified response that keeps "
            "the rigor of the first and the imagination of the second."
        )

    def handoff_continuation(self, message: str, from_agent: str, to_agent: str) -> str:
        role = AGENT_ROLES.get(to_agent, to_agent)
        if role == "analytical":
            focus = (
                "Provide the analytical follow-through: verify the reasoning, "
                "add structure, evidence and concrete steps."
            )
        else:
            focus = (
                "Provide the creative follow-through: explore new ideas, "
                "framings and possibilities the first answer left open."
            )
        return (
            f'The user asked: "{message}"\n\n'
            f"{from_agent.capitalize()} started on this and handed it over to you. "
            f"Their answer is provided as context.\n\n{focus}"
        )

    def character_context(
        self,
        character: Character,
        history: list[RoleplayMessage],
    ) -> str:
        """Render the character card and recent history into one block."""
        sections = [f"Character: {character.name}"]
        if character.system_prompt:
            sections.append(character.render(character.system_prompt))
        if character.description:
            sections.append(f"Description: {character.render(character.description)}")
        if character.personality:
            sections.append(f"Personality: {character.render(character.personality)}")
        if character.scenario:
            sections.append(f"Scenario: {character.render(character.scenario)}")
        if character.mes_example:
            sections.append(
                f"Example dialogue:\n{character.render(character.mes_example)}"
            )
        if history:
            lines = [
                f"{character.name if entry.role == 'character' else 'User'}: "
                f"{entry.content}"
                for entry in history
            ]
            sections.append("Recent conversation:\n" + "\n".join(lines))
        return "\n\n".join(sections)

    def character_analysis(self, context: str, message: str, name: str) -> str:
        return (
            f"{context}\n\n"
            f'The user now says: "{message}"\n\n'
            f"Do not answer as {name}. Write brief notes for the writer: which "
            "traits, facts from the scenario and established details the next "
            "reply must stay consistent with, and any contradictions to avoid."
        )

    def character_reply(self, context: str, message: str, name: str) -> str:
        return (
            f"{context}\n\n"
            f"User: {message}\n\n"
            f"Reply as {name}, staying fully in character."
        )

    def character_refine(self, reply: str, notes: str, name: str) -> str:
        return (
            f"Your draft reply as {name}:\n{reply}\n\n"
            f"Consistency notes:\n{notes}\n\n"
            f"Revise the reply so it respects the notes. Stay in character as "
            f"{name} and output only the revised reply."
        )

    def ooc_comment(self, context: str, message: str, agent: str) -> str:
        role = AGENT_ROLES.get(agent, agent)
        return (
            f"{context}\n\n"
            f"Out of character, the user says: {message}\n\n"
            f"Respond out of character from a {role} point of view: discuss the "
            "scene, the character and where the story could go."
        )
