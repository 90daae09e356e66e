from datetime import timedelta

from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from driving_exam.exams.models import ExamSession, ExamStatus

from .factories import CacheClearingTestCase, make_package, make_question, make_ticket, make_topic, make_user

BASE_URL = "/api/exams"


class ExamApiTests(CacheClearingTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user("api-driver")
        cls.package = make_package(question_count=2)
        cls.questions = [
            make_question(text=f"Savol {number}", correct=number % 3, packages=[cls.package])
            for number in range(4)
        ]
        cls.ticket = make_ticket(cls.questions, package=cls.package, passing_score=50)

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def start(self, **body):
        body.setdefault("ticket_id", self.ticket.pk)
        return self.client.post(f"{BASE_URL}/start/", body, format="json")

    def test_authentication_is_required(self):
        anonymous = APIClient()
        response = anonymous.post(f"{BASE_URL}/start/", {"ticket_id": self.ticket.pk}, format="json")
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_start_secure_mode_hides_answers(self):
        response = self.start(visible_mode=False)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body["status"], ExamStatus.STARTED)
        self.assertEqual(body["total_questions"], 4)
        self.assertFalse(body["is_visible_mode"])
        for question in body["questions"]:
            self.assertNotIn("correct_option_index", question)
            self.assertNotIn("explanation", question)

    def test_start_visible_mode_in_russian(self):
        response = self.client.post(
            f"{BASE_URL}/start/",
            {"ticket_id": self.ticket.pk, "visible_mode": True},
            format="json",
            HTTP_ACCEPT_LANGUAGE="ru-RU",
        )

        body = response.json()
        self.assertEqual(body["language"], "ru")
        self.assertEqual(body["questions"][0]["text"], "Savol 0 (ru)")
        self.assertEqual(body["questions"][0]["options"][1]["text"], "Вариант 1")
        self.assertEqual(body["questions"][1]["correct_option_index"], 1)

    def test_all_languages_flag(self):
        session_id = self.start().json()["session_id"]
        response = self.client.get(f"{BASE_URL}/sessions/{session_id}/?all_languages=true")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        text = response.json()["questions"][0]["text"]
        self.assertEqual(set(text), {"uzl", "uzc", "en", "ru"})
        self.assertEqual(text["en"], "Savol 0")

    def test_refetch_ignores_client_visibility_flag(self):
        session_id = self.start(visible_mode=False).json()["session_id"]
        response = self.client.get(f"{BASE_URL}/sessions/{session_id}/?visible_mode=true")

        body = response.json()
        self.assertFalse(body["is_visible_mode"])
        self.assertNotIn("correct_option_index", body["questions"][0])

    def test_invalid_start_request_uses_engine_error_format(self):
        response = self.client.post(
            f"{BASE_URL}/start/",
            {"ticket_id": self.ticket.pk, "package_id": self.package.pk},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertEqual(body["error_code"], "InvalidExamRequest")
        self.assertEqual(body["exception_type"], "InvalidExamRequest")

    def test_missing_ticket_is_404(self):
        response = self.client.post(f"{BASE_URL}/start/", {"ticket_id": 98765}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error_code"], "ContentNotFound")

    def test_answer_finish_and_result(self):
        session_id = self.start().json()["session_id"]
        answers_url = f"{BASE_URL}/sessions/{session_id}/answers/"

        first = self.client.post(
            answers_url,
            {"question_id": self.questions[0].pk, "selected_option_index": 0, "time_spent_seconds": 4},
            format="json",
        )
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(
            first.json(),
            {
                "question_id": self.questions[0].pk,
                "is_correct": True,
                "correct_option_index": 0,
                "explanation": "Izoh",
            },
        )
        self.client.post(
            answers_url,
            {"question_id": self.questions[1].pk, "selected_option_index": 2, "time_spent_seconds": 6},
            format="json",
        )

        finish = self.client.post(f"{BASE_URL}/sessions/{session_id}/finish/")
        self.assertEqual(finish.status_code, status.HTTP_200_OK)
        body = finish.json()
        self.assertEqual(body["status"], ExamStatus.FINISHED)
        self.assertEqual(body["correct_count"], 1)
        self.assertEqual(body["incorrect_count"], 1)
        self.assertEqual(body["unanswered_count"], 2)
        self.assertEqual(body["percentage"], 25.0)
        self.assertFalse(body["is_passed"])
        self.assertEqual(len(body["answer_details"]), 4)

        result = self.client.get(f"{BASE_URL}/sessions/{session_id}/result/")
        self.assertEqual(result.json(), body)

        statistics = self.client.get(f"{BASE_URL}/sessions/{session_id}/statistics/").json()
        self.assertEqual(statistics["fastest_answer_time"], 4)
        self.assertEqual(statistics["slowest_answer_time"], 6)
        self.assertEqual(statistics["unanswered_percentage"], 50.0)

    def test_answer_after_finish_is_conflict(self):
        session_id = self.start().json()["session_id"]
        self.client.post(f"{BASE_URL}/sessions/{session_id}/finish/")

        response = self.client.post(
            f"{BASE_URL}/sessions/{session_id}/answers/",
            {"question_id": self.questions[0].pk, "selected_option_index": 0},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error_code"], "SessionClosed")

    def test_expired_session_rejects_answers(self):
        session_id = self.start().json()["session_id"]
        ExamSession.objects.filter(pk=session_id).update(
            started_at=timezone.now() - timedelta(hours=1),
            expires_at=timezone.now() - timedelta(minutes=30),
        )

        response = self.client.post(
            f"{BASE_URL}/sessions/{session_id}/answers/",
            {"question_id": self.questions[0].pk, "selected_option_index": 0},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(ExamSession.objects.get(pk=session_id).status, ExamStatus.EXPIRED)

    def test_result_before_finish_is_conflict(self):
        session_id = self.start().json()["session_id"]
        response = self.client.get(f"{BASE_URL}/sessions/{session_id}/result/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error_code"], "SessionNotFinished")

    def test_other_users_session_is_not_found(self):
        session_id = self.start().json()["session_id"]
        stranger = APIClient()
        stranger.force_authenticate(user=make_user("stranger"))

        response = stranger.get(f"{BASE_URL}/sessions/{session_id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_submit_all(self):
        session_id = self.start().json()["session_id"]
        response = self.client.post(
            f"{BASE_URL}/sessions/{session_id}/submit/",
            {
                "answers": [
                    {"question_id": question.pk, "selected_option_index": question.correct_answer_index}
                    for question in self.questions
                ]
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["percentage"], 100.0)
        self.assertTrue(response.json()["is_passed"])

    def test_active_session_and_abandon(self):
        self.assertEqual(self.client.get(f"{BASE_URL}/sessions/active/").status_code, status.HTTP_204_NO_CONTENT)

        session_id = self.start().json()["session_id"]
        active = self.client.get(f"{BASE_URL}/sessions/active/")
        self.assertEqual(active.json()["session_id"], session_id)

        abandon = self.client.post(f"{BASE_URL}/sessions/{session_id}/abandon/")
        self.assertEqual(abandon.json(), {"session_id": session_id, "status": ExamStatus.ABANDONED})
        self.assertEqual(self.client.get(f"{BASE_URL}/sessions/active/").status_code, status.HTTP_204_NO_CONTENT)

    def test_history_is_paginated_and_filtered(self):
        first = self.start().json()["session_id"]
        self.client.post(f"{BASE_URL}/sessions/{first}/finish/")
        second = self.start().json()["session_id"]

        response = self.client.get(f"{BASE_URL}/history/")
        body = response.json()
        self.assertEqual(body["count"], 2)
        self.assertEqual([item["session_id"] for item in body["results"]], [second, first])

        finished = self.client.get(f"{BASE_URL}/history/?status=FINISHED").json()
        self.assertEqual([item["session_id"] for item in finished["results"]], [first])

        invalid = self.client.get(f"{BASE_URL}/history/?status=DONE")
        self.assertEqual(invalid.status_code, status.HTTP_400_BAD_REQUEST)

    def test_package_statistics(self):
        session_id = self.start().json()["session_id"]
        self.client.post(f"{BASE_URL}/sessions/{session_id}/finish/")

        response = self.client.get(f"{BASE_URL}/packages/{self.package.pk}/statistics/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["package_id"], self.package.pk)
        self.assertEqual(body["total_tests_in_package"], 1)
        self.assertEqual(body["completed_tests"], 1)
        self.assertEqual(body["failed_tests"], 1)
        self.assertEqual(body["success_rate"], 0.0)

    def test_ticket_statistics(self):
        session_id = self.start().json()["session_id"]
        self.client.post(
            f"{BASE_URL}/sessions/{session_id}/submit/",
            {
                "answers": [
                    {"question_id": question.pk, "selected_option_index": question.correct_answer_index}
                    for question in self.questions
                ]
            },
            format="json",
        )

        response = self.client.get(f"{BASE_URL}/tickets/{self.ticket.pk}/statistics/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["scope"], "ticket")
        self.assertEqual(body["ticket_id"], self.ticket.pk)
        self.assertEqual(body["ticket_number"], 1)
        self.assertEqual(body["package_id"], self.package.pk)
        self.assertEqual(body["completed_tests"], 1)
        self.assertEqual(body["passed_tests"], 1)
        self.assertEqual(body["success_rate"], 100.0)

    def test_topic_statistics(self):
        topic = make_topic()

        response = self.client.get(f"{BASE_URL}/topics/{topic.pk}/statistics/", HTTP_ACCEPT_LANGUAGE="en")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["scope"], "topic")
        self.assertEqual(body["topic_name"], "Road signs")
        self.assertEqual(body["completed_tests"], 0)
        self.assertEqual(body["success_rate"], 0.0)
        self.assertIsNone(body["average_percentage"])

        missing = self.client.get(f"{BASE_URL}/topics/98765/statistics/")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(missing.json()["error_code"], "ContentNotFound")

    def test_marathon_statistics(self):
        make_question(text="Savol 4")
        session_id = self.start(marathon=True, question_count=5, ticket_id=None).json()["session_id"]
        self.client.post(f"{BASE_URL}/sessions/{session_id}/finish/")

        body = self.client.get(f"{BASE_URL}/marathon/statistics/").json()

        self.assertEqual(body["scope"], "marathon")
        self.assertEqual(body["completed_tests"], 1)
        self.assertEqual(body["total_unanswered_questions"], 5)

    def test_leaderboard(self):
        session_id = self.start().json()["session_id"]
        self.client.post(f"{BASE_URL}/sessions/{session_id}/finish/")

        response = self.client.get(f"{BASE_URL}/leaderboard/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertIsNone(body["topic_id"])
        self.assertEqual(
            body["entries"],
            [
                {
                    "rank": 1,
                    "user_id": self.user.pk,
                    "user_name": "api-driver",
                    "best_score": 0.0,
                    "average_score": 0.0,
                    "total_exams": 1,
                }
            ],
        )

    def test_leaderboard_rejects_bad_limits(self):
        too_large = self.client.get(f"{BASE_URL}/leaderboard/?limit=101")
        self.assertEqual(too_large.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(too_large.json()["error_code"], "InvalidExamRequest")

        zero = self.client.get(f"{BASE_URL}/leaderboard/?limit=0")
        self.assertEqual(zero.status_code, status.HTTP_400_BAD_REQUEST)

        missing_topic = self.client.get(f"{BASE_URL}/leaderboard/?topic_id=98765")
        self.assertEqual(missing_topic.status_code, status.HTTP_404_NOT_FOUND)
