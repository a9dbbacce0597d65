"""Notify listeners on every change to user_operation_access.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

Row changes publish {"user_id", "operation_id"} on channel grant_changed;
TRUNCATE publishes "*". Notifications are delivered on commit, whichever
client made the change.
"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute(
        """
        CREATE OR REPLACE FUNCTION notify_grant_changed() RETURNS trigger AS $$
        BEGIN
            IF TG_OP = 'TRUNCATE' THEN
                PERFORM pg_notify('grant_changed', '*');
                RETURN NULL;
            END IF;
            IF TG_OP IN ('UPDATE', 'DELETE') THEN
                PERFORM pg_notify(
                    'grant_changed',
                    json_build_object('user_id', OLD.user_id, 'operation_id', OLD.operation_id)::text
                );
            END IF;
            IF TG_OP IN ('INSERT', 'UPDATE') THEN
                PERFORM pg_notify(
                    'grant_changed',
                    json_build_object('user_id', NEW.user_id, 'operation_id', NEW.operation_id)::text
                );
            END IF;
            RETURN NULL;
        END;
        $$ LANGUAGE plpgsql
        """
    )
    op.execute(
        """
        CREATE TRIGGER trg_user_operation_access_notify
        AFTER INSERT OR UPDATE OR DELETE ON user_operation_access
        FOR EACH ROW EXECUTE FUNCTION notify_grant_changed()
        """
    )
    op.execute(
        """
        CREATE TRIGGER trg_user_operation_access_notify_truncate
        AFTER TRUNCATE ON user_operation_access
        FOR EACH STATEMENT EXECUTE FUNCTION notify_grant_changed()
        """
    )


def downgrade() -> None:
    op.execute(
        "DROP TRIGGER IF EXISTS trg_user_operation_access_notify_truncate ON user_operation_access"
    )
    op.execute("DROP TRIGGER IF EXISTS trg_user_operation_access_notify ON user_operation_access")
    op.execute("DROP FUNCTION IF EXISTS notify_grant_changed()")
