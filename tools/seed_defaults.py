from dotenv import load_dotenv
load_dotenv()

import os
import sys
from pathlib import Path

from supabase import create_client

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.db import DEFAULT_SETTINGS, DEFAULT_EMPRESAS, DEFAULT_LEADS, SETTINGS_KEY  # noqa: E402

SUPABASE_URL = os.environ["SUPABASE_URL"]
SUPABASE_SERVICE_ROLE_KEY = os.environ["SUPABASE_SERVICE_ROLE_KEY"]


def main():
    supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)

    # 1) metas
    existing = supabase.table("dashboard_settings").select("key").eq("key", SETTINGS_KEY).execute().data
    if existing:
        print("[OK] dashboard_settings já existe.")
    else:
        supabase.table("dashboard_settings").insert({"key": SETTINGS_KEY, **DEFAULT_SETTINGS}).execute()
        print("[OK] dashboard_settings criado com valores padrão.")

    # 2) equipe (só categorias vazias)
    for category, seed in (("empresas", DEFAULT_EMPRESAS), ("leads", DEFAULT_LEADS)):
        rows = supabase.table("team_members").select("id").eq("category", category).execute().data
        if rows:
            print(f"[OK] {category}: {len(rows)} membros já cadastrados.")
            continue
        supabase.table("team_members").insert(seed).execute()
        print(f"[OK] {category}: inseridos {len(seed)} membros padrão.")


if __name__ == "__main__":
    main()
