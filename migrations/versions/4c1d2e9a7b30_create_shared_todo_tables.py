"""create_shared_todo_tables

Revision ID: 4c1d2e9a7b30
Revises:
Create Date: 2026-10-17 09:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4c1d2e9a7b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles, folders, todos and user preferences."""
    op.create_table('todo_profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_todo_profiles_email', 'todo_profiles', ['email'], unique=True)

    op.create_table('todo_folders',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('shared_with', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('can_edit', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['todo_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_todo_folders_user_id', 'todo_folders', ['user_id'], unique=False)

    # folder_id has no ON DELETE action: todos are detached before a folder is deleted
    op.create_table('todos',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_complete', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('folder_id', sa.UUID(), nullable=True),
        sa.Column('shared_with', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('can_edit', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['todo_profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['folder_id'], ['todo_folders.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_todos_user_id', 'todos', ['user_id'], unique=False)
    op.create_index('ix_todos_folder_id', 'todos', ['folder_id'], unique=False)

    # GIN indexes back the "shared with me" containment queries
    for table in ('todos', 'todo_folders'):
        for column in ('shared_with', 'can_edit'):
            op.create_index(
                f'ix_{table}_{column}',
                table,
                [column],
                unique=False,
                postgresql_using='gin',
            )

    op.create_table('todo_user_preferences',
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('preferences', postgresql.JSONB(), server_default='{}', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['todo_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id'),
    )


def downgrade() -> None:
    """Drop all shared todo tables."""
    op.drop_table('todo_user_preferences')
    for table in ('todos', 'todo_folders'):
        for column in ('shared_with', 'can_edit'):
            op.drop_index(f'ix_{table}_{column}', table_name=table)
    op.drop_index('ix_todos_folder_id', table_name='todos')
    op.drop_index('ix_todos_user_id', table_name='todos')
    op.drop_table('todos')
    op.drop_index('ix_todo_folders_user_id', table_name='todo_folders')
    op.drop_table('todo_folders')
    op.drop_index('ix_todo_profiles_email', table_name='todo_profiles')
    op.drop_table('todo_profiles')
