from driving_exam.content.models import Question
from driving_exam.exams import responses
from driving_exam.localization import AcceptLanguage
from driving_exam.services import ExamService, StartExamRequest
from driving_exam.services.content_catalog import ContentCatalog, question_to_dict

from .factories import CacheClearingTestCase, make_question, make_ticket, make_user


def reload(question):
    return Question.objects.prefetch_related("options").get(pk=question.pk)


class QuestionToDictTests(CacheClearingTestCase):
    def test_explanation_in_russian_only_is_kept(self):
        question = make_question(explanation="")
        question.explanation_ru = "Объяснение"
        question.save()

        data = question_to_dict(reload(question))

        self.assertEqual(data["explanation"]["ru"], "Объяснение")
        self.assertIsNone(data["explanation"]["uzl"])
        self.assertIsNone(data["explanation"]["en"])

    def test_missing_explanation_is_none(self):
        data = question_to_dict(reload(make_question(explanation="")))
        self.assertIsNone(data["explanation"])

    def test_uzbek_explanation_fills_missing_locales(self):
        data = question_to_dict(reload(make_question(explanation="Izoh")))
        self.assertEqual(data["explanation"], {"uzl": "Izoh", "uzc": "Izoh", "en": "Izoh", "ru": "Izoh"})

    def test_options_follow_their_index(self):
        data = question_to_dict(reload(make_question(option_count=3, correct=2)))
        self.assertEqual([option["index"] for option in data["options"]], [0, 1, 2])
        self.assertEqual(data["correct_option_index"], 2)
        self.assertIsNone(data["image_url"])

    def test_ticket_pool_carries_russian_explanation(self):
        question = make_question(explanation="")
        question.explanation_ru = "Объяснение"
        question.save()
        ticket = make_ticket([question])

        pool = ContentCatalog().ticket_questions(ticket)

        self.assertEqual(pool[0]["explanation"]["ru"], "Объяснение")


class RussianExplanationAnswerTests(CacheClearingTestCase):
    def test_checked_answer_shows_russian_explanation(self):
        user = make_user()
        question = make_question(explanation="")
        question.explanation_ru = "Объяснение"
        question.save()
        ticket = make_ticket([question])
        service = ExamService()

        session = service.start_exam(user, StartExamRequest(ticket_id=ticket.pk)).session
        check = service.submit_answer(user, session.pk, question.pk, 0, 3)

        payload = responses.check_answer_payload(check, AcceptLanguage.RU)
        self.assertEqual(payload["explanation"], "Объяснение")
