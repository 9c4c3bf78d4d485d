"""Organization seeder: the root of the demo data set."""

from sprout import seeder


@seeder(name="organizations")
async def organizations(ctx, deps):
    """Create demo organizations."""
    fake = ctx.faker
    count = int(ctx.params.get("demo", {}).get("organizations", 3))
    orgs = await ctx.step(
        f"Generate {count} organizations",
        lambda: [
            {"id": f"org-{i + 1}", "name": fake.company(), "domain": fake.domain_name()}
            for i in range(count)
        ],
        use_cache=True,
    )
    return {"organizations": orgs}
