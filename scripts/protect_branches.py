from scripts._base import ScriptEntry

script = ScriptEntry(
    name="protect-branches",
    path="protect-branches.sh",
    packages=("gh", "parallel", "jq"),
    description="Protect main/master branches in all public repositories",
)
