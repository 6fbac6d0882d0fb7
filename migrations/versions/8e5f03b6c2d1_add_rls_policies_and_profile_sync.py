"""add_rls_policies_and_profile_sync

Revision ID: 8e5f03b6c2d1
Revises: 4c1d2e9a7b30
Create Date: 2026-10-17 09:40:02.771645

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8e5f03b6c2d1"
down_revision: str | Sequence[str] | None = "4c1d2e9a7b30"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TABLES = ["todo_profiles", "todo_folders", "todos", "todo_user_preferences"]


def upgrade() -> None:
    """Add Row Level Security policies and the auth.users -> todo_profiles trigger.

    The API connects with a service role that bypasses RLS and enforces the
    same rules in the service layer. The policies apply to direct Supabase
    client connections. ``shared_with``/``can_edit`` are JSONB arrays of user
    id strings, so membership is tested with the ``?`` operator.
    """
    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")

    # --- Profiles: readable by every signed-in user (share picker) ---
    op.execute("""
        CREATE POLICY profiles_select ON todo_profiles
            FOR SELECT TO authenticated USING (true);
    """)
    op.execute("""
        CREATE POLICY profiles_update ON todo_profiles
            FOR UPDATE TO authenticated USING ((SELECT auth.uid()) = id);
    """)

    # --- Folders ---
    op.execute("""
        CREATE POLICY folders_owner_all ON todo_folders
            FOR ALL TO authenticated USING ((SELECT auth.uid()) = user_id);
    """)
    op.execute("""
        CREATE POLICY folders_shared_select ON todo_folders
            FOR SELECT TO authenticated
            USING (shared_with ? (SELECT auth.uid())::text);
    """)
    op.execute("""
        CREATE POLICY folders_editor_update ON todo_folders
            FOR UPDATE TO authenticated
            USING (can_edit ? (SELECT auth.uid())::text);
    """)

    # --- Todos ---
    op.execute("""
        CREATE POLICY todos_owner_all ON todos
            FOR ALL TO authenticated USING ((SELECT auth.uid()) = user_id);
    """)
    op.execute("""
        CREATE POLICY todos_shared_select ON todos
            FOR SELECT TO authenticated
            USING (
                shared_with ? (SELECT auth.uid())::text
                OR folder_id IN (
                    SELECT id FROM todo_folders
                    WHERE shared_with ? (SELECT auth.uid())::text
                )
            );
    """)
    op.execute("""
        CREATE POLICY todos_editor_update ON todos
            FOR UPDATE TO authenticated
            USING (
                can_edit ? (SELECT auth.uid())::text
                OR folder_id IN (
                    SELECT id FROM todo_folders
                    WHERE can_edit ? (SELECT auth.uid())::text
                )
            );
    """)

    # --- Preferences: owner only ---
    op.execute("""
        CREATE POLICY preferences_owner_all ON todo_user_preferences
            FOR ALL TO authenticated USING ((SELECT auth.uid()) = user_id);
    """)

    # --- Profile sync from Supabase auth ---
    op.execute("""
        CREATE OR REPLACE FUNCTION handle_new_todo_user()
        RETURNS TRIGGER
        LANGUAGE plpgsql
        SECURITY DEFINER
        SET search_path = public
        AS $$
        BEGIN
            INSERT INTO public.todo_profiles (id, email, display_name, created_at, updated_at)
            VALUES (
                NEW.id,
                NEW.email,
                NEW.raw_user_meta_data ->> 'display_name',
                now(),
                now()
            )
            ON CONFLICT (id) DO NOTHING;
            RETURN NEW;
        END;
        $$;
    """)
    op.execute("""
        CREATE TRIGGER on_auth_user_created_todo_profile
            AFTER INSERT ON auth.users
            FOR EACH ROW EXECUTE FUNCTION handle_new_todo_user();
    """)

    # Realtime publication for the change feed of direct clients
    op.execute("ALTER PUBLICATION supabase_realtime ADD TABLE todos, todo_folders;")


def downgrade() -> None:
    """Remove RLS policies, the profile trigger and the realtime publication entries."""
    op.execute("ALTER PUBLICATION supabase_realtime DROP TABLE todos, todo_folders;")
    op.execute("DROP TRIGGER IF EXISTS on_auth_user_created_todo_profile ON auth.users;")
    op.execute("DROP FUNCTION IF EXISTS handle_new_todo_user();")

    policies = {
        "todo_profiles": ["profiles_select", "profiles_update"],
        "todo_folders": ["folders_owner_all", "folders_shared_select", "folders_editor_update"],
        "todos": ["todos_owner_all", "todos_shared_select", "todos_editor_update"],
        "todo_user_preferences": ["preferences_owner_all"],
    }
    for table, names in policies.items():
        for name in names:
            op.execute(f"DROP POLICY IF EXISTS {name} ON {table};")

    for table in TABLES:
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY;")
