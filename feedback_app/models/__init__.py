from .academic_year import AcademicYear
from .department import Department
from .semester import Semester
from .division import Division
from .subject import Subject
from .faculty import Faculty
from .student import Student
from .override_student import OverrideStudent
from .subject_allocation import SubjectAllocation, LECTURE_TYPE_LECTURE, LECTURE_TYPE_LAB
from .feedback_form import FeedbackForm, FORM_STATUS_DRAFT, FORM_STATUS_ACTIVE, FORM_STATUS_CLOSED
from .question_category import QuestionCategory
from .feedback_question import FeedbackQuestion, LECTURE_BATCH_MARKER, QUESTION_TYPE_RATING, QUESTION_TYPE_TEXT
from .form_access import FormAccess
from .student_response import StudentResponse
from .feedback_snapshot import FeedbackSnapshot
from .feedback_analytics import FeedbackAnalytics
