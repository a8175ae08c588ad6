"""The LLND assessment content.

One catalog is shared by the standalone quiz, the guest quiz and the
enrollment wizard. Bump CATALOG_VERSION whenever a question, an answer or a
threshold changes so stored drafts can be matched to the content they were
started against.
"""

from functools import lru_cache

from llnd_portal.schemas.quiz import Question, QuestionKind, QuestionPart, QuizCatalog, Section

CATALOG_VERSION = "2024.1"

PASSING_PERCENTAGE = 66


def _part(label, options, correct):
    return QuestionPart(label=label, options=tuple(options), correct_answer=correct)


def _numeracy() -> Section:
    return Section(
        id="numeracy",
        title="Section 1: Numeracy",
        description="Test your numerical skills and problem-solving abilities",
        passing_percentage=PASSING_PERCENTAGE,
        questions=(
            Question(
                id="n1",
                prompt="A hard hat costs $32. How much will three hard hats cost?",
                kind=QuestionKind.dropdown,
                options=("$64", "$96", "$128", "$160"),
                correct_answer="$96|$4.00",
                media="hardhat",
                parts=(
                    _part("(a) Total cost", ["$64", "$96", "$128", "$160"], "$96"),
                    _part(
                        "(b) If you pay with $100 how much change will you get?",
                        ["$2.00", "$4.00", "$6.00", "$8.00"],
                        "$4.00",
                    ),
                ),
            ),
            Question(
                id="n2",
                prompt="A safety barrier is 2.4 metres long.",
                kind=QuestionKind.dropdown,
                options=("3 barriers", "4 barriers", "5 barriers", "6 barriers"),
                correct_answer="5 barriers|75 kg",
                media="barrier",
                parts=(
                    _part(
                        "(a) How many barriers are needed to cover 12 metres?",
                        ["3 barriers", "4 barriers", "5 barriers", "6 barriers"],
                        "5 barriers",
                    ),
                    _part(
                        "(b) If each barrier weighs 15 kg, what is the total weight of 5 barriers?",
                        ["60 kg", "65 kg", "70 kg", "75 kg"],
                        "75 kg",
                    ),
                ),
            ),
            Question(
                id="n3",
                prompt=(
                    '"A scaffold has a maximum load of 300 kg.\n\n'
                    "Worker A weighs 84 kg and carries 10 kg of tools.\n"
                    'Worker B weighs 92 kg and carries 15 kg of tools."'
                ),
                kind=QuestionKind.dropdown,
                options=("176 kg", "186 kg", "196 kg", "201 kg"),
                correct_answer="201 kg|99 kg",
                media="scaffold",
                parts=(
                    _part(
                        "(a) What is the combined total load of Worker A and B?",
                        ["176 kg", "186 kg", "196 kg", "201 kg"],
                        "201 kg",
                    ),
                    _part(
                        "(b) How much load is left before the scaffold reaches its limit?",
                        ["89 kg", "94 kg", "99 kg", "104 kg"],
                        "99 kg",
                    ),
                ),
            ),
        ),
    )


def _literacy() -> Section:
    return Section(
        id="literacy",
        title="Section 2: Literacy (Reading & Writing)",
        description="Assess your reading comprehension and written communication skills",
        passing_percentage=PASSING_PERCENTAGE,
        questions=(
            Question(
                id="l1",
                prompt="1. Read the email",
                kind=QuestionKind.dropdown,
                options=("Silvia", "Mike", "Bridgestone", "Port Melbourne"),
                correct_answer="Silvia|Mike|Tyres needed - Order no 2457|Bridgestone",
                media="email",
                parts=(
                    _part("a. Who is the email from?", ["Silvia", "Mike", "Bridgestone", "Port Melbourne"], "Silvia"),
                    _part("b. Who is the email to?", ["Silvia", "Mike", "Bridgestone", "Silvia Chinoto"], "Mike"),
                    _part(
                        "c. What is the subject?",
                        [
                            "Tyres needed - Order no 2457",
                            "Quote Number 2457",
                            "Bridgestone Order",
                            "Port Melbourne Warehouse",
                        ],
                        "Tyres needed - Order no 2457",
                    ),
                    _part(
                        "d. What company does Mike work for?",
                        ["Silvia Commercial", "Port Melbourne", "Bridgestone", "Taranza Serenity"],
                        "Bridgestone",
                    ),
                ),
            ),
            Question(
                id="l2",
                prompt="1. Read the poster on Infection control",
                kind=QuestionKind.dropdown,
                options=("Everyone's", "Doctor's", "Nurse's", "Patient's"),
                correct_answer="Everyone's|9|1|Before and after providing care",
                media="infection-poster",
                parts=(
                    _part(
                        "(a) Whose responsibility is it to keep patients safe from infection?",
                        ["Everyone's", "Doctor's", "Nurse's", "Patient's"],
                        "Everyone's",
                    ),
                    _part(
                        "(b) How many ways does the poster tell you to keep patients safe from infection?",
                        ["5", "7", "9", "11"],
                        "9",
                    ),
                    _part(
                        "(c) How many times should you use a needle and syringe?",
                        ["1", "2", "3", "As many as needed"],
                        "1",
                    ),
                    _part(
                        "(d) When should you clean your hands?",
                        [
                            "Before providing care",
                            "After providing care",
                            "Before and after providing care",
                            "Only when dirty",
                        ],
                        "Before and after providing care",
                    ),
                ),
            ),
            Question(
                id="l3",
                prompt="1. Read the scenario and then fill out the Incident Report Form.",
                kind=QuestionKind.dropdown,
                options=("Jenny", "JEN-123", "Moulding", "Full Time"),
                correct_answer="hand|forklift|ground|ice pack|First Aid",
                media="incident-form",
                parts=(
                    _part("a) Jenny only used one _____ getting onto the", ["hand", "foot", "arm", "leg"], "hand"),
                    _part("b) getting onto the _____", ["forklift", "truck", "ladder", "platform"], "forklift"),
                    _part(
                        "c) She bruised her right hip falling onto the _____",
                        ["ground", "floor", "concrete", "surface"],
                        "ground",
                    ),
                    _part(
                        "d) An _____ was put on Jenny's hip",
                        ["ice pack", "bandage", "ointment", "compress"],
                        "ice pack",
                    ),
                    _part("e) Medical Treatment:", ["None", "First Aid", "Doctor Only", "Hospital"], "First Aid"),
                ),
            ),
            Question(
                id="l4",
                prompt=(
                    '"All workers must wear hard hats, steel-capped boots and high-visibility vests while on a '
                    "construction site. Personal protective equipment (PPE) must be checked daily. Report any "
                    "damaged PPE or equipment immediately to the site supervisor. Workers must follow all safety "
                    'signs and instructions at all times."\n\n'
                    "Which three items of PPE must workers wear on site?"
                ),
                kind=QuestionKind.multiple_choice,
                options=(
                    "Steel-capped boots, safety glasses, high-visibility vests",
                    "Hard hats, steel-capped boots, high-visibility vests",
                    "Safety glasses, gloves, ear plugs",
                    "Safety glasses, hard hats, gloves",
                ),
                correct_answer="Hard hats, steel-capped boots, high-visibility vests",
                media="ppe-reading",
            ),
            Question(
                id="l5",
                prompt="Who should workers report damaged PPE or equipment to?",
                kind=QuestionKind.multiple_choice,
                options=("The safety sign", "A co-worker", "The equipment supplier", "The site supervisor"),
                correct_answer="The site supervisor",
            ),
            Question(
                id="l6",
                prompt="Which instruction must workers follow according to the notice?",
                kind=QuestionKind.multiple_choice,
                options=(
                    "Follow all safety signs and instructions",
                    "Report to work before 6:00 am",
                    "Take breaks every two hours",
                    "Only wear PPE when using tools",
                ),
                correct_answer="Follow all safety signs and instructions",
                media="ppe-notice",
            ),
        ),
    )


def _language() -> Section:
    return Section(
        id="language",
        title="Section 3: Language",
        description="Test your listening and comprehension skills",
        passing_percentage=PASSING_PERCENTAGE,
        questions=(
            Question(
                id="lang1",
                prompt="Listen to the story about Carlos",
                kind=QuestionKind.dropdown,
                correct_answer="May 2020|2@|Skilled Migration Visa|Computer Programmer|Evening|Local TAFE",
                media="audio-carlos",
                parts=(
                    _part(
                        "(a) When did Carlos and Marina emigrate to Australia?",
                        ["January 2020", "May 2020", "September 2020", "December 2020"],
                        "May 2020",
                    ),
                    _part("(b) How many children do they have?", ["1@", "2@", "3@", "4@"], "2@"),
                    _part(
                        "(c) What type of visa did they enter Australia on?",
                        ["Tourist Visa", "Work Visa", "Skilled Migration Visa", "Student Visa"],
                        "Skilled Migration Visa",
                    ),
                    _part(
                        "(d) What job does Marina do?",
                        ["Teacher", "Nurse", "Computer Programmer", "Engineer"],
                        "Computer Programmer",
                    ),
                    _part(
                        "(e) Are they doing their English class in the evening or during the day?",
                        ["Morning", "Afternoon", "Evening", "Night"],
                        "Evening",
                    ),
                    _part(
                        "(f) Where are they doing their English course?",
                        ["Online", "University", "Local TAFE", "Community Center"],
                        "Local TAFE",
                    ),
                ),
            ),
        ),
    )


def _digital() -> Section:
    return Section(
        id="digital",
        title="Section 4: Digital Literacy",
        description="Evaluate your digital skills and online safety knowledge",
        passing_percentage=PASSING_PERCENTAGE,
        questions=(
            Question(
                id="d1",
                prompt=(
                    '"1. Drag and drop the two PDF checklist files into the Checklist Book folder located on the '
                    "desktop. 2. Drag and drop the image file into the Images folder located on the desktop.\""
                ),
                kind=QuestionKind.drag_drop,
                correct_answer="file-organization",
                media="desktop-files",
            ),
            Question(
                id="d2",
                prompt="Drag and drop each word onto the correct digital device.",
                kind=QuestionKind.drag_drop,
                correct_answer="device-matching",
                media="digital-devices",
            ),
            Question(
                id="d3",
                prompt=(
                    '"Your trainer asks you to find information about Safety training academy on the website.\n\n'
                    "Steps:\n"
                    '1. Open Search Engine (e.g Google) and search for: "Safety training academy".\n'
                    "2. Go to the official website with this information.\n"
                    '3. Write down the URL (web address) of the page:"'
                ),
                kind=QuestionKind.text,
                correct_answer="https://safetytrainingacademy.edu.au/",
                media="url-search",
            ),
        ),
    )


@lru_cache()
def get_catalog() -> QuizCatalog:
    # Section order is fixed: numeracy, literacy, language, digital
    return QuizCatalog(
        version=CATALOG_VERSION,
        sections=(_numeracy(), _literacy(), _language(), _digital()),
    )


def get_section(section_id: str) -> Section:
    section = get_catalog().get_section(section_id)
    if section is None:
        raise KeyError(section_id)
    return section
