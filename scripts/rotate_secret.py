"""签名密钥轮换：生成新的 JWT_SECRET 写入 .env（已有则替换，没有则追加）。

轮换后所有旧令牌立即失效，需重启服务并让管理员重新登录。
用法：python -m scripts.rotate_secret [--env PATH] [--yes]"""
# scripts/rotate_secret.py
import argparse
import secrets
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
KEY = "JWT_SECRET"


def new_secret() -> str:
    return secrets.token_urlsafe(48)


def apply_secret(env_path: Path, secret: str) -> bool:
    """写入 secret，返回是否替换了已有的一行。"""
    lines = env_path.read_text(encoding="utf-8").splitlines()
    replaced = False
    for i, line in enumerate(lines):
        if line.startswith(f"{KEY}="):
            lines[i] = f"{KEY}={secret}"
            replaced = True
    if not replaced:
        lines.append(f"{KEY}={secret}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return replaced


def run(argv=None, ask=input) -> int:
    parser = argparse.ArgumentParser(description="Rotate JWT_SECRET in .env")
    parser.add_argument("--env", default=str(ROOT / ".env"), help="path to the .env file")
    parser.add_argument("--yes", action="store_true", help="skip the confirmation prompt")
    args = parser.parse_args(argv)

    env_path = Path(args.env)
    if not env_path.exists():
        print(f"[rotate_secret] .env file not found at {env_path}", file=sys.stderr, flush=True)
        return 1

    if not args.yes:
        answer = ask("Generate and apply new JWT_SECRET? (yes/no): ").strip().lower()
        if answer not in ("y", "yes"):
            print("[rotate_secret] aborted.", flush=True)
            return 1

    replaced = apply_secret(env_path, new_secret())
    action = "replaced" if replaced else "appended"
    print(f"[rotate_secret] new {KEY} {action}. Restart the backend; existing tokens are now invalid.",
          flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(run())
