"""
Static, versioned reference data for the four instruments.

Question order, ids and category tags are part of the scoring contract:
changing a tag changes every score computed from it, so bump
``CATALOG_VERSION`` whenever this table changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import SectionType

CATALOG_VERSION = "2024.1"

RIASEC_TYPES: tuple[str, ...] = ("R", "I", "A", "S", "E", "C")
BRAIN_QUADRANTS: tuple[str, ...] = ("L1", "L2", "R1", "R2")
STEPS_CATEGORIES: tuple[str, ...] = ("S", "T", "E", "P", "Speaking")

LIKERT_MIN, LIKERT_MAX = 1, 5
BRAIN_RATING_MIN, BRAIN_RATING_MAX = 1, 4
INSIGHT_TEXT_MIN, INSIGHT_TEXT_MAX = 10, 500
INSIGHT_LIST_MIN, INSIGHT_ITEM_MAX = 3, 100


class ResponseShape(str, Enum):
    BOOLEAN = "boolean"
    RATING_SET = "rating_set"  # four numbers bound to [L1, L2, R1, R2]
    LIKERT = "likert"
    TEXT = "text"
    CHOICE_LIST = "choice_list"


@dataclass(frozen=True, slots=True)
class CatalogQuestion:
    id: str
    text: str
    tags: tuple[str, ...]
    shape: ResponseShape
    statements: tuple[str, ...] = ()

    @property
    def tag(self) -> str:
        return self.tags[0]


@dataclass(frozen=True, slots=True)
class InstrumentDefinition:
    section: SectionType
    name: str
    categories: tuple[str, ...]
    questions: tuple[CatalogQuestion, ...]

    @property
    def question_ids(self) -> tuple[str, ...]:
        return tuple(q.id for q in self.questions)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def ids_for_category(self, category: str) -> tuple[str, ...]:
        return tuple(q.id for q in self.questions if category in q.tags)


_INTEREST_ITEMS: tuple[tuple[str, str], ...] = (
    ("I", "I like to take up task that test my knowledge and skills."),
    ("C", "I prefer work that I have clear deliverables."),
    ("A", "I like taking good photos"),
    ("A", "I love to sing"),
    ("C", "I like things in proper order"),
    ("E", "In the future I would like to set up my own company."),
    ("A", "I love to dance"),
    ("E", "I like roles which give me authority."),
    ("A", "Poetry, stories and plays interest me"),
    ("E", "I can persuade others easily."),
    ("R", "I prefer working outdoor"),
    ("E", "I like to put things in order."),
    ("I", "I like to explore for new information."),
    ("S", "I like team work."),
    ("R", "I am a person who likes to use tools and mechanical equipment."),
    ("C", "I can manage records without errors."),
    ("C", "I am fast at doing paper work."),
    ("R", "I like repairing electric fittings."),
    ("C", "I like book keeping (hisaab-kitaab)"),
    ("I", "I prefer to work on my own."),
    ("I", "I like solving numerical problems."),
    ("E", "I often make choices that influence others."),
    ("S", "I help others in resolving their conflicts."),
    ("I", "I can make sense of scientific theories with ease."),
    ("S", "I can work easily with others."),
    ("R", "I enjoy opening things to understand how they work."),
    ("S", "I like to work towards betterment of others."),
    ("S", "I like to help someone who is in trouble."),
    ("R", "I like adventure, trekking, playing sports, etc."),
    ("A", "I enjoy things such as painting, craft, etc."),
    ("R", "I do not give up easily"),
    ("C", "My friends and parents think I am disciplined"),
    ("E", "I am self sufficient"),
    ("S", "My friends think that I am very understanding"),
    ("I", "I am curious about things"),
    ("A", "I get bored with repetition and time table"),
    ("C", "Playing Monopoly/Business or Ludo"),
    ("S", "Caring for old people"),
    ("A", "Writing or appreciating poetry"),
    ("E", "Being a Team Leader or Class Monitor and taking decisions"),
    ("S", "Social Service"),
    ("I", "Visiting monuments"),
    ("R", "Gardening"),
    ("C", "Collecting souvenirs/fridge magnets/stamps/coins/songs"),
    ("R", "Travelling"),
    ("E", "Standing for a cause"),
    ("S", "Going out with friends"),
    ("E", "Investing money in share market or taking higher risk for higher return"),
    ("A", "Listening to music"),
    ("C", "Writing Diary"),
    ("I", "Research work which involves observing and taking notes"),
    ("I", "Solving Sudoku/Puzzles"),
    ("A", "Artwork"),
    ("R", "Fixing/Repairing Things like vehicle, machines, grinder, etc."),
)

_BRAIN_SETS: tuple[tuple[str, str, str, str], ...] = (
    (
        "I am a practical person",
        "I am a disciplined person",
        "I am a creative person",
        "I am a friendly person",
    ),
    (
        "I am motivated by achievements",
        "I am motivated by presenting my work as the best",
        "I am motivated by the fun involved in the process",
        "I am motivated by the new people I meet",
    ),
    (
        "When talking, my arms are usually folded",
        "When talking, I usually point out my fingers on people or objects",
        "When talking, I move my arms a lot to emphasize my points",
        "When talking, I often touch other people",
    ),
    (
        "I notice mistakes easily",
        "I notice details and remember facts",
        "I notice anything new or different",
        "I notice changes in behaviour",
    ),
    (
        "I value logic and common sense",
        "I value realism fairness and structure",
        "I value new efforts and ideas",
        "I value harmony, forgiveness and caring",
    ),
    (
        "I prefer magazines that have factual, figures and point to point information",
        "I prefer magazines that have detailed information, that can make me knowledgeable",
        "I prefer magazines that have interesting facts and with some cartoons or images",
        "I prefer magazines that have interesting stories about people and are colourful",
    ),
    (
        "In a conflict situation I prefer to have all the facts and I stick to them",
        "In a conflict situation I ask questions and I want clear answers",
        "In a conflict situation I follow my gut feeling and solve it as quickly as possible",
        "In a conflict situation I listen to others to find a solution. I hate conflict",
    ),
    (
        "I prefer not to be surprised or waste time",
        "Time management is important and every minute counts",
        "I love surprises and time management is not one of my strength",
        "I love to spend time with people and do not feel controlled by time",
    ),
    (
        "My way or high way",
        "Practice makes a man perfect",
        "What is the purpose of life without fun",
        "If you don't have good friends, you have no existence",
    ),
    (
        "I am a Perfectionist, neat and goal Oriented",
        "I am Organized Systematic and Precise",
        "I am innovative, creative and enthusiastic",
        "I am nurturing, supportive and empathetic",
    ),
)

_STEPS_ITEMS: tuple[tuple[str, str], ...] = (
    ("S", "How good are you in managing your time?"),
    ("S", "How well groomed are you?"),
    ("S", "How good are you in Managing Emotions?"),
    ("S", "How would you rate your confidence level?"),
    ("S", "How would you rate your ability to manage finance and/or any other resources?"),
    ("T", "How would you rate your adaptability?"),
    ("T", "How would you rate your Decision Making skills?"),
    ("T", "How would you rate your ability to Empathize with others?"),
    ("T", "How effectively are you able to Promote Others?"),
    ("T", "How effectively do you Manage Interpersonal Conflict?"),
    ("E", "How would you rate your ability to Build a Network?"),
    ("E", "How would you rate your ability to take initiative?"),
    ("E", "How would you rate your leadership skills?"),
    ("E", "How comfortable are you in taking calculated risks?"),
    ("E", "How would you rate your ability to spot and use opportunities?"),
    ("P", "How would you rate your critical thinking?"),
    ("P", "How creative are you when solving problems?"),
    ("P", "How resilient are you when a solution does not work the first time?"),
    ("P", "How well do you plan and organise complex tasks?"),
    ("P", "How well do you use data and facts to reach a decision?"),
    ("Speaking", "How would you rate your verbal communication?"),
    ("Speaking", "How good a listener are you?"),
    ("Speaking", "How aware are you of your body language?"),
    ("Speaking", "How comfortable are you presenting to a group?"),
    ("Speaking", "How well do you adapt your message to your audience?"),
)

PERSONAL_INSIGHT_TEXT_FIELDS: tuple[str, ...] = ("whatYouLike", "whatYouAreGoodAt", "recentProjects")
PERSONAL_INSIGHT_LIST_FIELDS: tuple[str, ...] = ("characterStrengths", "valuesInLife")

_INSIGHT_PROMPTS: dict[str, str] = {
    "whatYouLike": "What do you like doing?",
    "whatYouAreGoodAt": "What are you good at?",
    "recentProjects": "Describe a recent project you are proud of.",
    "characterStrengths": "Pick at least three character strengths.",
    "valuesInLife": "Pick at least three values that guide your life.",
}


def _build_catalog() -> dict[SectionType, InstrumentDefinition]:
    interest = InstrumentDefinition(
        section=SectionType.RIASEC,
        name="Interest Inventory (RIASEC)",
        categories=RIASEC_TYPES,
        questions=tuple(
            CatalogQuestion(str(i), text, (tag,), ResponseShape.BOOLEAN)
            for i, (tag, text) in enumerate(_INTEREST_ITEMS, start=1)
        ),
    )
    brain = InstrumentDefinition(
        section=SectionType.BRAIN_PROFILE,
        name="Brain Profile Test",
        categories=BRAIN_QUADRANTS,
        questions=tuple(
            CatalogQuestion(
                str(i), f"Statement set {i}", BRAIN_QUADRANTS, ResponseShape.RATING_SET, statements
            )
            for i, statements in enumerate(_BRAIN_SETS, start=1)
        ),
    )
    steps = InstrumentDefinition(
        section=SectionType.EMPLOYABILITY,
        name="Employability Test (STEPS)",
        categories=STEPS_CATEGORIES,
        questions=tuple(
            CatalogQuestion(str(i), text, (tag,), ResponseShape.LIKERT)
            for i, (tag, text) in enumerate(_STEPS_ITEMS, start=1)
        ),
    )
    insights = InstrumentDefinition(
        section=SectionType.PERSONAL_INSIGHTS,
        name="Personal Insights",
        categories=PERSONAL_INSIGHT_TEXT_FIELDS + PERSONAL_INSIGHT_LIST_FIELDS,
        questions=tuple(
            CatalogQuestion(
                field,
                _INSIGHT_PROMPTS[field],
                (field,),
                ResponseShape.TEXT if field in PERSONAL_INSIGHT_TEXT_FIELDS else ResponseShape.CHOICE_LIST,
            )
            for field in PERSONAL_INSIGHT_TEXT_FIELDS + PERSONAL_INSIGHT_LIST_FIELDS
        ),
    )
    return {d.section: d for d in (interest, brain, steps, insights)}


INSTRUMENTS: dict[SectionType, InstrumentDefinition] = _build_catalog()


def get_instrument(section: SectionType) -> InstrumentDefinition:
    return INSTRUMENTS[section]


# ---------- Descriptive tables ----------

RIASEC_INTERPRETATIONS: dict[str, str] = {
    "R": "Realistic (Doers) - You prefer hands-on work and practical activities",
    "I": "Investigative (Thinkers) - You enjoy research, analysis, and intellectual challenges",
    "A": "Artistic (Creators) - You are drawn to creative and expressive activities",
    "S": "Social (Helpers) - You like working with and helping people",
    "E": "Enterprising (Persuaders) - You enjoy leadership and business activities",
    "C": "Conventional (Organizers) - You prefer structured, detail-oriented work",
}

RIASEC_TRAITS: dict[str, str] = {
    "R": "hands-on and practical",
    "I": "analytical and research-oriented",
    "A": "creative and expressive",
    "S": "people-focused and helpful",
    "E": "leadership-oriented and persuasive",
    "C": "organized and detail-oriented",
}

RIASEC_FIELDS: dict[str, tuple[str, ...]] = {
    "R": ("Engineering", "Agriculture", "Construction", "Mechanics", "Outdoor Work"),
    "I": ("Research", "Science", "Medicine", "Technology", "Analysis"),
    "A": ("Design", "Writing", "Music", "Theatre", "Visual Arts"),
    "S": ("Teaching", "Counseling", "Healthcare", "Social Work", "Human Resources"),
    "E": ("Business", "Sales", "Management", "Entrepreneurship", "Politics"),
    "C": ("Accounting", "Administration", "Banking", "Data Management", "Operations"),
}

CAREERS_BY_TYPE: dict[str, tuple[str, ...]] = {
    "R": ("Engineer", "Technician", "Mechanic", "Farmer", "Construction Worker"),
    "I": ("Researcher", "Scientist", "Analyst", "Doctor", "Mathematician"),
    "A": ("Artist", "Designer", "Writer", "Musician", "Photographer"),
    "S": ("Teacher", "Counselor", "Social Worker", "Nurse", "Coach"),
    "E": ("Manager", "Entrepreneur", "Sales Representative", "Lawyer", "Politician"),
    "C": ("Accountant", "Administrator", "Data Entry Clerk", "Librarian", "Secretary"),
}

EXTENDED_CAREERS_BY_TYPE: dict[str, tuple[str, ...]] = {
    "R": CAREERS_BY_TYPE["R"] + ("Pilot", "Electrician", "Carpenter"),
    "I": CAREERS_BY_TYPE["I"] + ("Psychologist", "Veterinarian", "Pharmacist"),
    "A": CAREERS_BY_TYPE["A"] + ("Actor", "Architect", "Fashion Designer"),
    "S": CAREERS_BY_TYPE["S"] + ("Therapist", "HR Manager", "Community Worker"),
    "E": CAREERS_BY_TYPE["E"] + ("Marketing Manager", "Real Estate Agent", "Investment Banker"),
    "C": (
        "Accountant",
        "Administrator",
        "Data Analyst",
        "Librarian",
        "Secretary",
        "Banker",
        "Insurance Agent",
        "Tax Preparer",
    ),
}

INDUSTRIES_BY_TYPE: dict[str, tuple[str, ...]] = {
    "R": ("Manufacturing", "Construction", "Agriculture", "Transportation"),
    "I": ("Healthcare", "Research", "Technology", "Education"),
    "A": ("Media & Entertainment", "Design", "Publishing", "Advertising"),
    "S": ("Education", "Healthcare", "Social Services", "Human Resources"),
    "E": ("Business", "Finance", "Sales & Marketing", "Legal"),
    "C": ("Finance", "Administration", "Data Management", "Government"),
}

BRAIN_INTERPRETATIONS: dict[str, str] = {
    "L1": "Analyst and Realist - You are logical, practical, and fact-based",
    "L2": "Conservative/Organizer - You are structured, detailed, and systematic",
    "R1": "Strategist and Imaginative - You are creative, innovative, and big-picture focused",
    "R2": "Socializer and Empathic - You are people-oriented, emotional, and collaborative",
}

BRAIN_TRAITS: dict[str, str] = {
    "L1": "logical and analytical",
    "L2": "organized and systematic",
    "R1": "creative and strategic",
    "R2": "empathetic and collaborative",
}

LEARNING_TIPS: dict[str, tuple[str, ...]] = {
    "L1": (
        "Use logical frameworks and step-by-step approaches",
        "Focus on facts and data-driven learning",
    ),
    "L2": ("Create structured study schedules", "Use detailed notes and organized materials"),
    "R1": ("Engage in creative problem-solving", "Use visual aids and mind maps"),
    "R2": ("Learn through group discussions", "Seek mentors who provide emotional support"),
}

SKILL_AREAS: dict[str, str] = {
    "S": "Self-management skills",
    "T": "Teamwork and collaboration",
    "E": "Enterprising and leadership",
    "P": "Problem-solving abilities",
    "Speaking": "Communication skills",
}

STEPS_IMPROVEMENT_TIPS: dict[str, str] = {
    "S": "Focus on self-management skills: time management, grooming, emotional control",
    "T": "Develop teamwork skills: empathy, adaptability, conflict resolution",
    "E": "Build enterprising skills: leadership, networking, risk management",
    "P": "Enhance problem-solving: critical thinking, creativity, resilience",
    "Speaking": "Improve communication: verbal skills, listening, body language",
}
