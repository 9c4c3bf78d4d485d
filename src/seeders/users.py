"""User and post seeders built on top of organizations."""

from __future__ import annotations

from typing import Dict, List

from sprout import seeder

from .organizations import organizations


def _users_for(fake, org: Dict, per_org: int) -> List[Dict]:
    return [
        {
            "id": f"{org['id']}-user-{i + 1}",
            "org_id": org["id"],
            "name": fake.name(),
            "email": f"{fake.user_name()}@{org['domain']}",
        }
        for i in range(per_org)
    ]


@seeder(name="users", depends_on=[organizations])
async def users(ctx, deps):
    """Create users for every organization."""
    orgs = deps["organizations"]["organizations"]
    per_org = int(ctx.params.get("demo", {}).get("users_per_org", 5))
    created: List[Dict] = []
    for org in orgs:
        created += await ctx.step(
            f"Users for {org['name']}",
            lambda org=org: _users_for(ctx.faker, org, per_org),
        )
    assert len(created) == len(orgs) * per_org
    return {"user_ids": [u["id"] for u in created], "users": created}


@seeder(name="posts", depends_on=[users])
async def posts(ctx, deps):
    """Create a couple of posts per user."""
    fake = ctx.faker
    authored = await ctx.step(
        "Write posts",
        lambda: [
            {"author_id": uid, "title": fake.sentence(nb_words=6), "body": fake.paragraph()}
            for uid in deps["users"]["user_ids"]
            for _ in range(2)
        ],
    )
    return {"post_count": len(authored)}
