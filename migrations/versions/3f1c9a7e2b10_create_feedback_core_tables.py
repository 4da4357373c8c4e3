from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3f1c9a7e2b10"
down_revision = None
branch_labels = None
depends_on = None


def _uuid(name, fk=None, nullable=False, ondelete="RESTRICT"):
    if fk:
        return sa.Column(name, sa.String(length=36), sa.ForeignKey(fk, ondelete=ondelete), nullable=nullable)
    return sa.Column(name, sa.String(length=36), nullable=nullable)


def _flag(name, default="false"):
    return sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.text(default))


def _created_at(name="created_at"):
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP"))


def upgrade():
    # ---- academic hierarchy ----
    op.create_table(
        "academic_years",
        _uuid("id"),
        sa.Column("year_string", sa.String(length=32), nullable=False),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_academic_years_year_string", "academic_years", ["year_string"], unique=False)

    op.create_table(
        "departments",
        _uuid("id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("abbreviation", sa.String(length=32), nullable=True),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "semesters",
        _uuid("id"),
        _uuid("department_id", "departments.id"),
        _uuid("academic_year_id", "academic_years.id"),
        sa.Column("semester_number", sa.Integer(), nullable=False),
        sa.Column("semester_type", sa.String(length=16), nullable=False, server_default=sa.text("'ODD'")),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_semesters_department_id", "semesters", ["department_id"], unique=False)
    op.create_index("ix_semesters_academic_year_id", "semesters", ["academic_year_id"], unique=False)
    op.create_index("ix_semesters_year_dept_number", "semesters", ["academic_year_id", "department_id", "semester_number"], unique=False)

    op.create_table(
        "divisions",
        _uuid("id"),
        _uuid("semester_id", "semesters.id"),
        sa.Column("division_name", sa.String(length=64), nullable=False),
        sa.Column("student_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_divisions_semester_id", "divisions", ["semester_id"], unique=False)

    op.create_table(
        "subjects",
        _uuid("id"),
        _uuid("semester_id", "semesters.id", nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("abbreviation", sa.String(length=32), nullable=True),
        sa.Column("subject_code", sa.String(length=32), nullable=True),
        sa.Column("type", sa.String(length=16), nullable=False, server_default=sa.text("'MANDATORY'")),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_subjects_semester_id", "subjects", ["semester_id"], unique=False)

    op.create_table(
        "faculties",
        _uuid("id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("abbreviation", sa.String(length=32), nullable=True),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "students",
        _uuid("id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("enrollment_number", sa.String(length=64), nullable=False),
        sa.Column("batch", sa.String(length=32), nullable=True),
        _uuid("academic_year_id", "academic_years.id", nullable=True),
        _uuid("semester_id", "semesters.id", nullable=True),
        _uuid("division_id", "divisions.id", nullable=True),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_enrollment_number", "students", ["enrollment_number"], unique=False)
    op.create_index("ix_students_academic_year_id", "students", ["academic_year_id"], unique=False)
    op.create_index("ix_students_semester_id", "students", ["semester_id"], unique=False)
    op.create_index("ix_students_division_id", "students", ["division_id"], unique=False)

    op.create_table(
        "override_students",
        _uuid("id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("enrollment_number", sa.String(length=64), nullable=True),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("semester", sa.String(length=16), nullable=True),
        sa.Column("batch", sa.String(length=32), nullable=True),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "subject_allocations",
        _uuid("id"),
        _uuid("faculty_id", "faculties.id"),
        _uuid("subject_id", "subjects.id"),
        _uuid("semester_id", "semesters.id"),
        _uuid("division_id", "divisions.id"),
        sa.Column("lecture_type", sa.String(length=16), nullable=False, server_default=sa.text("'LECTURE'")),
        sa.Column("batch", sa.String(length=32), nullable=True),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("lecture_type IN ('LECTURE','LAB')", name="ck_subject_allocations_lecture_type_valid"),
    )
    for col in ("faculty_id", "subject_id", "semester_id", "division_id"):
        op.create_index(f"ix_subject_allocations_{col}", "subject_allocations", [col], unique=False)

    # ---- forms & questions ----
    op.create_table(
        "feedback_forms",
        _uuid("id"),
        _uuid("subject_allocation_id", "subject_allocations.id"),
        _uuid("division_id", "divisions.id"),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default=sa.text("'DRAFT'")),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("status IN ('DRAFT','ACTIVE','CLOSED')", name="ck_feedback_forms_status_valid"),
    )
    op.create_index("ix_feedback_forms_subject_allocation_id", "feedback_forms", ["subject_allocation_id"], unique=False)
    op.create_index("ix_feedback_forms_division_id", "feedback_forms", ["division_id"], unique=False)

    op.create_table(
        "question_categories",
        _uuid("id"),
        sa.Column("category_name", sa.String(length=255), nullable=False),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "feedback_questions",
        _uuid("id"),
        _uuid("form_id", "feedback_forms.id", ondelete="CASCADE"),
        _uuid("category_id", "question_categories.id"),
        _uuid("faculty_id", "faculties.id"),
        _uuid("subject_id", "subjects.id"),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False, server_default=sa.text("'rating'")),
        sa.Column("batch", sa.String(length=32), nullable=False, server_default=sa.text("'None'")),
        _flag("is_required", "true"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    for col in ("form_id", "category_id", "faculty_id", "subject_id"):
        op.create_index(f"ix_feedback_questions_{col}", "feedback_questions", [col], unique=False)
    op.create_index("ix_feedback_questions_form_deleted", "feedback_questions", ["form_id", "is_deleted"], unique=False)

    # ---- submission ----
    op.create_table(
        "form_access",
        _uuid("id"),
        _uuid("form_id", "feedback_forms.id", ondelete="CASCADE"),
        _uuid("student_id", "students.id", nullable=True, ondelete="CASCADE"),
        _uuid("override_student_id", "override_students.id", nullable=True, ondelete="CASCADE"),
        sa.Column("access_token", sa.String(length=255), nullable=False),
        _flag("is_submitted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "(student_id IS NULL) <> (override_student_id IS NULL)",
            name="ck_form_access_one_respondent",
        ),
    )
    op.create_index("ix_form_access_access_token", "form_access", ["access_token"], unique=True)
    op.create_index("ix_form_access_form_id", "form_access", ["form_id"], unique=False)
    op.create_index("ix_form_access_student_id", "form_access", ["student_id"], unique=False)
    op.create_index("ix_form_access_override_student_id", "form_access", ["override_student_id"], unique=False)

    op.create_table(
        "student_responses",
        _uuid("id"),
        _uuid("student_id", "students.id", nullable=True),
        _uuid("override_student_id", "override_students.id", nullable=True),
        _uuid("feedback_form_id", "feedback_forms.id"),
        _uuid("question_id", "feedback_questions.id"),
        sa.Column("response_value", sa.Text(), nullable=False),
        _created_at("submitted_at"),
        _flag("is_deleted"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_id", "question_id", name="uq_student_responses_student_question"),
        sa.UniqueConstraint("override_student_id", "question_id", name="uq_student_responses_override_question"),
    )
    for col in ("student_id", "override_student_id", "feedback_form_id", "question_id"):
        op.create_index(f"ix_student_responses_{col}", "student_responses", [col], unique=False)
    op.create_index("ix_student_responses_form_deleted", "student_responses", ["feedback_form_id", "is_deleted"], unique=False)

    op.create_table(
        "feedback_snapshots",
        _uuid("id"),
        _uuid("original_student_response_id", "student_responses.id", ondelete="CASCADE"),
        _uuid("academic_year_id", nullable=True),
        sa.Column("academic_year_string", sa.String(length=32), nullable=True),
        _flag("academic_year_is_deleted"),
        _uuid("department_id", nullable=True),
        sa.Column("department_name", sa.String(length=255), nullable=True),
        sa.Column("department_abbreviation", sa.String(length=32), nullable=True),
        _flag("department_is_deleted"),
        _uuid("semester_id", nullable=True),
        sa.Column("semester_number", sa.Integer(), nullable=False),
        _flag("semester_is_deleted"),
        _uuid("division_id", nullable=True),
        sa.Column("division_name", sa.String(length=64), nullable=True),
        _flag("division_is_deleted"),
        _uuid("subject_id", nullable=True),
        sa.Column("subject_name", sa.String(length=255), nullable=True),
        sa.Column("subject_abbreviation", sa.String(length=32), nullable=True),
        sa.Column("subject_code", sa.String(length=32), nullable=True),
        _flag("subject_is_deleted"),
        _uuid("faculty_id", nullable=True),
        sa.Column("faculty_name", sa.String(length=255), nullable=True),
        sa.Column("faculty_email", sa.String(length=255), nullable=True),
        sa.Column("faculty_abbreviation", sa.String(length=32), nullable=True),
        _uuid("student_id", nullable=True),
        _uuid("override_student_id", nullable=True),
        _flag("is_override_student"),
        sa.Column("student_enrollment_number", sa.String(length=64), nullable=True),
        sa.Column("student_name", sa.String(length=255), nullable=True),
        sa.Column("student_email", sa.String(length=255), nullable=True),
        _uuid("form_id"),
        sa.Column("form_name", sa.String(length=255), nullable=True),
        sa.Column("form_status", sa.String(length=16), nullable=True),
        _flag("form_is_deleted"),
        _flag("form_deleted"),
        _uuid("question_id"),
        sa.Column("question_text", sa.Text(), nullable=True),
        sa.Column("question_type", sa.String(length=16), nullable=True),
        _uuid("question_category_id", nullable=True),
        sa.Column("question_category_name", sa.String(length=255), nullable=True),
        sa.Column("question_batch", sa.String(length=32), nullable=True),
        _flag("question_is_deleted"),
        sa.Column("response_value", sa.Text(), nullable=False),
        sa.Column("batch", sa.String(length=32), nullable=True),
        _created_at("submitted_at"),
        _flag("is_deleted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_feedback_snapshots_original_student_response_id", "feedback_snapshots",
        ["original_student_response_id"], unique=True,
    )
    for col in ("academic_year_id", "department_id", "semester_id", "division_id", "subject_id",
                "faculty_id", "student_id", "override_student_id", "form_id", "question_id"):
        op.create_index(f"ix_feedback_snapshots_{col}", "feedback_snapshots", [col], unique=False)
    op.create_index("ix_feedback_snapshots_year_semester", "feedback_snapshots", ["academic_year_id", "semester_number"], unique=False)
    op.create_index("ix_feedback_snapshots_faculty_year", "feedback_snapshots", ["faculty_id", "academic_year_id"], unique=False)

    # ---- pre-aggregates (written by an external job) ----
    op.create_table(
        "feedback_analytics",
        _uuid("id"),
        _uuid("form_id", "feedback_forms.id", nullable=True, ondelete="CASCADE"),
        sa.Column("average_rating", sa.Float(), nullable=False),
        sa.Column("completion_rate", sa.Float(), nullable=False),
        _created_at("calculated_at"),
        _flag("is_deleted"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_feedback_analytics_form_id", "feedback_analytics", ["form_id"], unique=False)
    op.create_index("ix_feedback_analytics_calculated_at", "feedback_analytics", ["calculated_at"], unique=False)


def downgrade():
    # Reverse dependency order; indexes go with their tables
    for table in (
        "feedback_analytics",
        "feedback_snapshots",
        "student_responses",
        "form_access",
        "feedback_questions",
        "question_categories",
        "feedback_forms",
        "subject_allocations",
        "override_students",
        "students",
        "faculties",
        "subjects",
        "divisions",
        "semesters",
        "departments",
        "academic_years",
    ):
        op.drop_table(table)
