"""Write the generated demo data to disk."""

from __future__ import annotations

import json
from pathlib import Path

from sprout import seeder

from .organizations import organizations
from .users import posts, users


@seeder(name="export", depends_on=[organizations, users, posts])
def export(ctx, deps):
    """Dump organizations and users as JSON under data/seed/."""
    out_dir = Path(ctx.params.get("demo", {}).get("out_dir", "data/seed"))
    out_dir.mkdir(parents=True, exist_ok=True)
    for name, payload in (
        ("organizations", deps["organizations"]["organizations"]),
        ("users", deps["users"]["users"]),
    ):
        (out_dir / f"{name}.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return {"out_dir": str(out_dir), "posts": deps["posts"]["post_count"]}
