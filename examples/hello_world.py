"""
key_keeper — Hello World

Declare each model once: its type, its key template and which commands
it may use. Accessors render the key from params and forward commands
to the store. Bad params never raise at bind time; the error reaches
you when a command runs.
"""

import asyncio

from key_keeper import Keeper, ModelType
from key_keeper.clients.memory import InMemoryClient

# ─── Your models (plain data — could come from a JSON or YAML file) ───

MODELS = {
    "post": {
        "type": ModelType.HASH,
        "key": "post:{postId}",
        "fields": {"count": {"like": "like:count", "comment": "comments:count"}},
    },
    "postCommentsIndex": {
        "type": ModelType.STRING,
        "key": "post:{postId}:comments:index",
        "disabledCommands": ["decr"],
    },
    "comment": {
        "type": ModelType.HASH,
        "key": "post:{postId}:comments:{commentId}",
        "allowedCommands": ["hget", "hset", "hgetall"],
    },
}


def report(error, result) -> None:
    if error is not None:
        print(f"  [ERROR] {type(error).__name__}: {error}")
    else:
        print(f"  [OK] {result!r}")


async def main():
    # ──────────────────────────────────────
    #  1. Create the keeper and register models
    # ──────────────────────────────────────
    keeper = Keeper(InMemoryClient(), partition="blog")
    keeper.create_models(MODELS)
    print(f"Models: {', '.join(keeper.list_models())}\n")

    # ──────────────────────────────────────
    #  2. Bind and run commands (chained)
    # ──────────────────────────────────────
    print("=== Write a post ===\n")

    post = keeper.model("post").get(1234)
    like = post.fields["count"]["like"]
    results = await post.hset("title", "Hello").hincrby(like, 1).hgetall().gather()

    print(f"  key:     {post.key}")
    print(f"  results: {results}")

    # ──────────────────────────────────────
    #  3. Comments: counter + hash with restricted commands
    # ──────────────────────────────────────
    print("\n=== Add a comment ===\n")

    index = keeper.model("postCommentsIndex").get(1234)
    [comment_id] = await index.incr().gather()

    comment = keeper.model("comment").get({"postId": 1234, "commentId": comment_id})
    comment.hset("body", "First!", callback=report)
    await comment.gather()

    print(f"  has hdel? {hasattr(comment, 'hdel')}")
    print(f"  has decr? {hasattr(index, 'decr')}")

    # ──────────────────────────────────────
    #  4. Bad params are reported when a command runs
    # ──────────────────────────────────────
    print("\n=== Missing params ===\n")

    broken = keeper.model("comment").get({"postId": 1234})
    print(f"  ok?   {broken.ok}")
    broken.hget("body", callback=report)


if __name__ == "__main__":
    asyncio.run(main())
