"""
Question bank for the security training games.

Questions are grouped by game type and difficulty. Correct answers and
explanations are only revealed after the player answers.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from truthshield.core.models.domain import Difficulty, GameType

QUESTIONS_PER_SESSION = 5


@dataclass(frozen=True)
class Question:
    question_id: str
    question: str
    options: Tuple[str, ...]
    correct_answer: str
    explanation: str
    category: str

    def public(self) -> Dict[str, object]:
        """The question as shown to a player, without its answer."""
        return {
            "question_id": self.question_id,
            "question": self.question,
            "options": list(self.options),
            "category": self.category,
        }

    def as_record(self) -> Dict[str, object]:
        return {**self.public(), "correct_answer": self.correct_answer, "explanation": self.explanation}


GAME_QUESTIONS: Dict[str, Dict[str, List[Question]]] = {
    GameType.SCAM_SPOTTER.value: {
        Difficulty.EASY.value: [
            Question(
                "ss_easy_1",
                'You receive an email saying "Your account will be suspended unless you click here immediately." '
                "What should you do?",
                (
                    "Click the link to save your account",
                    "Ignore and delete the email",
                    "Forward to all your friends",
                    "Reply with your password",
                ),
                "Ignore and delete the email",
                "This is a common phishing tactic. Legitimate companies never ask for immediate action via email.",
                "urgency_tactics",
            ),
            Question(
                "ss_easy_2",
                "A message says you won a prize in a contest you never entered. What is it most likely?",
                ("A lucky surprise", "A scam", "A company giveaway", "A mistake you should fix"),
                "A scam",
                "You cannot win a contest you did not enter. Prize messages like this try to collect your details.",
                "too_good_to_be_true",
            ),
        ],
        Difficulty.MEDIUM.value: [
            Question(
                "ss_medium_1",
                'An email from "Netflix Support" asks you to update payment information with a link to '
                "netflix-security.com. What do you do?",
                (
                    "Click the link and update information",
                    "Check the official Netflix website",
                    "Forward to Netflix",
                    "Ignore it completely",
                ),
                "Check the official Netflix website",
                "Always verify through official websites. Netflix uses netflix.com, not netflix-security.com.",
                "domain_spoofing",
            ),
            Question(
                "ss_medium_2",
                "Your bank texts you a code you did not request, then someone calls asking you to read it back. "
                "What should you do?",
                ("Read them the code", "Hang up and call your bank", "Text the code instead", "Wait for a second call"),
                "Hang up and call your bank",
                "One-time codes are only for you. Callers asking for them are trying to take over your account.",
                "account_takeover",
            ),
        ],
        Difficulty.HARD.value: [
            Question(
                "ss_hard_1",
                "An invoice email from a known supplier says their bank details changed. What is the safest step?",
                (
                    "Pay the new account",
                    "Reply to the email to confirm",
                    "Call the supplier on a number you already have",
                    "Pay half to each account",
                ),
                "Call the supplier on a number you already have",
                "Invoice redirection scams spoof real suppliers. Confirm changes through a channel you already trust.",
                "business_email_compromise",
            ),
            Question(
                "ss_hard_2",
                "Which sender address is most likely spoofed?",
                ("support@paypal.com", "service@paypa1.com", "no-reply@paypal.com", "help@paypal.com"),
                "service@paypa1.com",
                "Look-alike domains replace letters with similar characters, such as the digit 1 for the letter l.",
                "domain_spoofing",
            ),
        ],
        Difficulty.EXPERT.value: [
            Question(
                "ss_expert_1",
                "A link shows https://www.apple.com in the email text but hovering shows a different address. "
                "What does this indicate?",
                ("A redirect used by Apple", "Link text masking a malicious URL", "A broken link", "A tracking link"),
                "Link text masking a malicious URL",
                "The visible text of a link can say anything. Always check the real destination before clicking.",
                "link_masking",
            ),
        ],
    },
    GameType.THREAT_HUNTER.value: {
        Difficulty.EASY.value: [
            Question(
                "th_easy_1",
                'A popup says "Virus detected! Download our antivirus now!" What is this?',
                (
                    "A real virus warning",
                    "A helpful security alert",
                    "A scam to install malware",
                    "A system notification",
                ),
                "A scam to install malware",
                "Legitimate antivirus software doesn't use alarming popups. This is scareware.",
                "malware_tactics",
            ),
            Question(
                "th_easy_2",
                "A friend sends a file called homework.pdf.exe. What should you do?",
                ("Open it", "Do not open it and ask your friend", "Rename it", "Share it with others"),
                "Do not open it and ask your friend",
                "A double extension ending in .exe is a program pretending to be a document.",
                "malicious_attachments",
            ),
        ],
        Difficulty.MEDIUM.value: [
            Question(
                "th_medium_1",
                "Your computer suddenly runs slowly and shows new toolbars you did not install. What is likely?",
                ("A normal update", "Adware or other malware", "A hardware fault", "Low battery"),
                "Adware or other malware",
                "Unexpected toolbars and slowdowns are classic signs of unwanted software.",
                "infection_signs",
            ),
        ],
        Difficulty.HARD.value: [
            Question(
                "th_hard_1",
                "A USB stick labelled 'Salaries 2024' is found in the car park. What should you do?",
                (
                    "Plug it in to find the owner",
                    "Hand it to IT security without plugging it in",
                    "Format it and keep it",
                    "Plug it into a colleague's computer",
                ),
                "Hand it to IT security without plugging it in",
                "Dropped USB devices are a known way to deliver malware. Let security staff handle them.",
                "physical_vectors",
            ),
        ],
        Difficulty.EXPERT.value: [
            Question(
                "th_expert_1",
                "A document asks you to 'Enable Content' to view it properly. What is the risk?",
                ("None", "It enables macros that may run malicious code", "It uses more memory", "It disables spell check"),
                "It enables macros that may run malicious code",
                "Malicious documents rely on macros. Only enable them for files you fully trust.",
                "macro_malware",
            ),
        ],
    },
    GameType.FIREWALL_COMMANDER.value: {
        Difficulty.EASY.value: [
            Question(
                "fc_easy_1",
                "What does a firewall do?",
                (
                    "Speeds up your internet",
                    "Controls which network traffic is allowed",
                    "Stores your passwords",
                    "Cleans viruses from files",
                ),
                "Controls which network traffic is allowed",
                "A firewall decides which connections may enter or leave your device or network.",
                "firewall_basics",
            ),
        ],
        Difficulty.MEDIUM.value: [
            Question(
                "fc_medium_1",
                "An unknown app asks to allow incoming connections through your firewall. What should you do?",
                ("Allow it", "Deny it unless you trust the app", "Turn off the firewall", "Restart the computer"),
                "Deny it unless you trust the app",
                "Only allow incoming connections for software you know and need.",
                "access_rules",
            ),
        ],
        Difficulty.HARD.value: [
            Question(
                "fc_hard_1",
                "Which default rule is safest for incoming traffic on a home router?",
                ("Allow all", "Deny all, allow what is needed", "Allow web traffic only", "Log only"),
                "Deny all, allow what is needed",
                "Default-deny limits exposure to only the services you chose to open.",
                "default_deny",
            ),
        ],
        Difficulty.EXPERT.value: [
            Question(
                "fc_expert_1",
                "Your router has remote administration enabled on port 8080. What should you do?",
                ("Leave it", "Disable it unless you need it", "Change the port to 80", "Share the password"),
                "Disable it unless you need it",
                "Remote administration exposes your router's login page to the whole internet.",
                "attack_surface",
            ),
        ],
    },
    GameType.PRIVACY_GUARDIAN.value: {
        Difficulty.EASY.value: [
            Question(
                "pg_easy_1",
                "Which of these is safe to share publicly online?",
                ("Your home address", "Your favourite colour", "Your school name", "Your phone number"),
                "Your favourite colour",
                "Personal details like addresses, schools and phone numbers can be used to find you.",
                "personal_information",
            ),
        ],
        Difficulty.MEDIUM.value: [
            Question(
                "pg_medium_1",
                "A quiz app wants access to your contacts, location and photos. What should you do?",
                ("Allow everything", "Only allow what the app really needs", "Allow contacts only", "Uninstall your phone"),
                "Only allow what the app really needs",
                "Apps should only get the permissions their features require.",
                "app_permissions",
            ),
        ],
        Difficulty.HARD.value: [
            Question(
                "pg_hard_1",
                "Why is posting a photo of your new house keys risky?",
                ("It is not risky", "Keys can be copied from a clear photo", "Photos use data", "Keys may rust"),
                "Keys can be copied from a clear photo",
                "High resolution photos can reveal enough detail to cut a working copy of a key.",
                "oversharing",
            ),
        ],
        Difficulty.EXPERT.value: [
            Question(
                "pg_expert_1",
                "What metadata can a photo straight from your phone reveal?",
                ("Nothing", "The GPS location where it was taken", "Your password", "Your bank balance"),
                "The GPS location where it was taken",
                "Photos often carry EXIF data including location. Strip it before sharing.",
                "metadata",
            ),
        ],
    },
    GameType.CRYPTO_DEFENDER.value: {
        Difficulty.EASY.value: [
            Question(
                "cd_easy_1",
                "Someone online promises to double your bitcoin if you send it to them first. What is this?",
                ("An investment", "A scam", "A bank service", "A gift"),
                "A scam",
                "Nobody can guarantee to double your money. Sending crypto first is how these scams work.",
                "crypto_scams",
            ),
        ],
        Difficulty.MEDIUM.value: [
            Question(
                "cd_medium_1",
                "A support agent asks for your wallet's recovery phrase to fix a problem. What should you do?",
                ("Send it", "Never share it", "Send half of it", "Share it by phone only"),
                "Never share it",
                "A recovery phrase gives full control of your wallet. Real support will never ask for it.",
                "wallet_security",
            ),
        ],
        Difficulty.HARD.value: [
            Question(
                "cd_hard_1",
                "A new token promises guaranteed 50% weekly returns and pays early investors from new deposits. "
                "What is it?",
                ("A savings account", "A Ponzi scheme", "A stablecoin", "An index fund"),
                "A Ponzi scheme",
                "Paying old investors with new money is the defining sign of a Ponzi scheme.",
                "investment_fraud",
            ),
        ],
        Difficulty.EXPERT.value: [
            Question(
                "cd_expert_1",
                "A website asks you to connect your wallet and approve unlimited token spending to claim an airdrop. "
                "What is the risk?",
                ("None", "The site can drain those tokens", "Higher gas fees only", "The airdrop is delayed"),
                "The site can drain those tokens",
                "Unlimited approvals let a contract move your tokens at any time.",
                "approval_phishing",
            ),
        ],
    },
    GameType.SOCIAL_SENTINEL.value: {
        Difficulty.EASY.value: [
            Question(
                "so_easy_1",
                "Someone you only know online asks where you live. What should you do?",
                ("Tell them", "Do not answer and tell a trusted adult", "Give a nearby address", "Send a photo instead"),
                "Do not answer and tell a trusted adult",
                "Never share where you live with people you only know online.",
                "stranger_danger",
            ),
        ],
        Difficulty.MEDIUM.value: [
            Question(
                "so_medium_1",
                "A new online friend asks you to keep your chats secret from your parents. What does this suggest?",
                ("They are shy", "A warning sign of grooming", "They value privacy", "Nothing unusual"),
                "A warning sign of grooming",
                "Asking for secrecy from parents is a common grooming tactic. Tell a trusted adult.",
                "grooming_signs",
            ),
        ],
        Difficulty.HARD.value: [
            Question(
                "so_hard_1",
                "Your 'boss' messages from a new number asking you to buy gift cards urgently. What do you do?",
                ("Buy them quickly", "Verify with your boss through a known channel", "Ask for the codes", "Ignore work"),
                "Verify with your boss through a known channel",
                "Impersonating managers to request gift cards is a common social engineering scam.",
                "impersonation",
            ),
        ],
        Difficulty.EXPERT.value: [
            Question(
                "so_expert_1",
                "A caller claiming to be IT support asks you to install remote access software. What is the risk?",
                ("None", "They can take control of your computer", "It slows the computer", "It needs a licence"),
                "They can take control of your computer",
                "Remote access scams give attackers full control. Verify IT requests through your help desk.",
                "pretexting",
            ),
        ],
    },
}

_QUESTION_INDEX: Dict[str, Question] = {
    question.question_id: question
    for by_difficulty in GAME_QUESTIONS.values()
    for questions in by_difficulty.values()
    for question in questions
}


def select_questions(
    game_type: GameType | str,
    difficulty: Difficulty | str,
    count: int = QUESTIONS_PER_SESSION,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """Up to ``count`` shuffled questions for a game type and difficulty."""
    pool = list(GAME_QUESTIONS.get(GameType(game_type).value, {}).get(Difficulty(difficulty).value, []))
    (rng or random).shuffle(pool)
    return pool[:count]


def get_question(question_id: str) -> Optional[Question]:
    return _QUESTION_INDEX.get(question_id)
