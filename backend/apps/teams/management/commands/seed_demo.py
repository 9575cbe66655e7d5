from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.teams import services
from apps.teams.models import Team

DEMO_PASSWORD = "demo1234"

DEMO_TEAMS = [
    {
        "name": "Eco-Warriors",
        "problem_statement": "Reducing household carbon footprints through smart IoT monitoring.",
        "theme": "Sustainability",
        "participants": [
            {"name": "Alice Chen", "background": "CS", "role": "Frontend"},
            {"name": "Bob Smith", "background": "EE", "role": "IoT Lead"},
            {"name": "Charlie Day", "background": "Design", "role": "UI/UX"},
            {"name": "Dana White", "background": "CS", "role": "Backend"},
            {"name": "Eve Black", "background": "Biz", "role": "Product"},
        ],
        "milestones": {"brainstorming_complete": True, "prd_generated": True, "build_complete": False},
        "tool_usage": {"coding_tools": ["React", "Node.js", "Python"], "llm_used": "Gemini 2.5 Flash"},
        "progress_updates": {"screen_recording_url": "", "submission_url": ""},
        "evaluation": {"novelty": 4, "fastest_to_build": 3, "feature_count": 2, "clarity": 5, "impact_reach": 4},
        "elo_score": 1200,
    },
    {
        "name": "HealthBridge",
        "problem_statement": "Connecting rural patients with specialized city doctors via WebRTC.",
        "theme": "Healthcare",
        "participants": [
            {"name": "Frank Lee", "background": "Med", "role": "Expert"},
            {"name": "Grace Ho", "background": "CS", "role": "Fullstack"},
            {"name": "Henry Ford", "background": "CS", "role": "DevOps"},
            {"name": "Ivy Blue", "background": "Marketing", "role": "Pitch"},
            {"name": "Jack Ma", "background": "CS", "role": "Frontend"},
        ],
        "milestones": {"brainstorming_complete": True, "prd_generated": True, "build_complete": True},
        "tool_usage": {"coding_tools": ["Next.js", "Socket.io"], "llm_used": "GPT-4"},
        "progress_updates": {
            "screen_recording_url": "https://youtube.com/demo",
            "submission_url": "https://github.com/hb",
        },
        "evaluation": {"novelty": 3, "fastest_to_build": 5, "feature_count": 4, "clarity": 4, "impact_reach": 5},
        "elo_score": 1450,
    },
    {
        "name": "FinFlow",
        "problem_statement": "DeFi protocol for micro-lending in developing economies.",
        "theme": "FinTech",
        "participants": [
            {"name": "Karl Marx", "background": "Econ", "role": "Strategy"},
            {"name": "Lara Croft", "background": "CS", "role": "Solidity"},
            {"name": "Mike Ross", "background": "Law", "role": "Compliance"},
            {"name": "Nina Simone", "background": "Design", "role": "Creative"},
            {"name": "Oscar Wilde", "background": "Writing", "role": "Content"},
        ],
        "milestones": {"brainstorming_complete": True, "prd_generated": False, "build_complete": False},
        "tool_usage": {"coding_tools": ["Hardhat", "Ethers.js"], "llm_used": "Claude 3"},
        "progress_updates": {"screen_recording_url": "", "submission_url": ""},
        "evaluation": {"novelty": 5, "fastest_to_build": 2, "feature_count": 1, "clarity": 3, "impact_reach": 5},
        "elo_score": 1100,
    },
]


class Command(BaseCommand):
    help = "Load three demo teams with participants, milestones, tools and scores. Existing names are skipped."

    def add_arguments(self, parser):
        parser.add_argument("--password", type=str, default=DEMO_PASSWORD, help="Password for every demo team")

    def handle(self, *args, **options):
        password = options["password"]
        created = 0
        for demo in DEMO_TEAMS:
            if Team.objects.filter(name=demo["name"]).exists():
                self.stdout.write(self.style.WARNING(f"Skipped '{demo['name']}' (already present)"))
                continue
            with transaction.atomic():
                team = services.create_team(
                    name=demo["name"],
                    password=password,
                    problem_statement=demo["problem_statement"],
                    theme=demo["theme"],
                    participants=demo["participants"],
                )
                services.update_milestones(team.id, **demo["milestones"])
                services.update_tool_usage(team.id, **demo["tool_usage"])
                services.update_progress_updates(team.id, **demo["progress_updates"])
                services.update_evaluation(team.id, **demo["evaluation"])
                Team.objects.filter(id=team.id).update(elo_score=demo["elo_score"])
            created += 1
            self.stdout.write(self.style.SUCCESS(f"Created team #{team.team_number} '{team.name}'"))
        self.stdout.write(self.style.SUCCESS(f"Seeded {created} demo team(s)"))
