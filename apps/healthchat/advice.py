"""
Rule-based health advice.

Every message is classified against a fixed, ordered table of topics. Each
topic carries English, Hindi and Odia trigger words that are tested
together, so a mixed-language message still matches. The first topic in
``TOPIC_KEYWORDS`` order wins; there is no scoring.

The same classification drives both the canned reply (in the session's
language) and the title suggested for a new session.
"""
from typing import NamedTuple, Optional

from apps.healthchat.models.message import ChatLanguage

TITLE_MAX_LENGTH = 30
TITLE_WORDS = 3

# Ordered by priority: fever > headache > cough > pain
TOPIC_KEYWORDS = {
    "fever": ("fever", "बुखार", "ଜ୍ୱର"),
    "headache": ("headache", "सिर दर्द", "ମୁଣ୍ଡ ବ୍ୟଥା"),
    "cough": ("cough", "खांसी", "କାଶ"),
    "pain": ("pain", "दर्द", "ବ୍ୟଥା"),
}

TOPIC_TITLES = {
    "fever": "Fever Query",
    "headache": "Headache Consultation",
    "cough": "Cough Treatment",
    "pain": "Pain Management",
}

# "pain" has a title but no dedicated reply; it gets the default text.
RESPONSES = {
    ChatLanguage.EN.value: {
        "fever": (
            "I understand you're experiencing fever. Here are some general recommendations:\n\n"
            "1. Rest and stay hydrated\n"
            "2. Monitor your temperature regularly\n"
            "3. Take paracetamol if needed (follow dosage instructions)\n"
            "4. If fever persists for more than 3 days or exceeds 103°F, please consult a doctor immediately.\n\n"
            "⚠️ This is general advice. For persistent symptoms, please seek medical attention."
        ),
        "headache": (
            "For headache relief, consider these steps:\n\n"
            "1. Rest in a quiet, dark room\n"
            "2. Apply a cold or warm compress\n"
            "3. Stay hydrated\n"
            "4. Avoid screens for a while\n"
            "5. Gentle neck and shoulder stretches may help\n\n"
            "If headaches are severe, frequent, or accompanied by other symptoms, please consult a healthcare provider."
        ),
        "cough": (
            "For cough management:\n\n"
            "1. Stay hydrated with warm liquids\n"
            "2. Honey and warm water can be soothing\n"
            "3. Avoid irritants like smoke\n"
            "4. Use a humidifier if air is dry\n"
            "5. Rest your voice\n\n"
            "Seek medical attention if cough persists for more than 2 weeks, produces blood, or is accompanied by high fever."
        ),
        "default": (
            "Thank you for your question. I'm here to provide general health guidance. Based on your symptoms, "
            "I'd recommend consulting with a healthcare professional for proper diagnosis and treatment.\n\n"
            "For immediate medical assistance, you can also reach out through WhatsApp. "
            "Is there anything specific about your symptoms you'd like to discuss?"
        ),
    },
    ChatLanguage.HI.value: {
        "fever": (
            "मैं समझता हूं कि आपको बुखार है। यहां कुछ सामान्य सुझाव हैं:\n\n"
            "1. आराम करें और हाइड्रेटेड रहें\n"
            "2. नियमित रूप से अपना तापमान चेक करें\n"
            "3. जरूरत पड़ने पर पैरासिटामोल लें\n"
            "4. अगर बुखार 3 दिन से ज्यादा रहे या 103°F से ज्यादा हो, तो तुरंत डॉक्टर से मिलें।\n\n"
            "⚠️ यह सामान्य सलाह है। लगातार लक्षणों के लिए चिकित्सा सहायता लें।"
        ),
        "headache": (
            "सिर दर्द के लिए:\n\n"
            "1. शांत, अंधेरे कमरे में आराम करें\n"
            "2. ठंडी या गर्म सिकाई करें\n"
            "3. पानी पिएं\n"
            "4. स्क्रीन से बचें\n"
            "5. गर्दन और कंधे की हल्की मालिश करें\n\n"
            "अगर सिर दर्द गंभीर या बार-बार हो, तो डॉक्टर से मिलें।"
        ),
        "cough": (
            "खांसी के लिए:\n\n"
            "1. गर्म तरल पदार्थ पिएं\n"
            "2. शहद और गर्म पानी लें\n"
            "3. धुएं से बचें\n"
            "4. हवा में नमी बनाए रखें\n"
            "5. आवाज को आराम दें\n\n"
            "अगर खांसी 2 हफ्ते से ज्यादा रहे, तो डॉक्टर से मिलें।"
        ),
        "default": (
            "आपके प्रश्न के लिए धन्यवाद। मैं सामान्य स्वास्थ्य सलाह प्रदान करता हूं। "
            "उचित निदान और उपचार के लिए किसी स्वास्थ्य पेशेवर से सलाह लें।"
        ),
    },
    ChatLanguage.OD.value: {
        "fever": (
            "ମୁଁ ବୁଝୁଛି ଆପଣଙ୍କର ଜ୍ୱର ହୋଇଛି। ଏଠାରେ କିଛି ସାଧାରଣ ସୁପାରିଶ:\n\n"
            "1. ବିଶ୍ରାମ ନିଅନ୍ତୁ ଏବଂ ପାଣି ପିଅନ୍ତୁ\n"
            "2. ନିୟମିତ ତାପମାତ୍ରା ଯାଞ୍ଚ କରନ୍ତୁ\n"
            "3. ଆବଶ୍ୟକ ହେଲେ ପାରାସିଟାମଲ ନିଅନ୍ତୁ\n"
            "4. ଯଦି ଜ୍ୱର 3 ଦିନରୁ ଅଧିକ ରହେ, ତୁରନ୍ତ ଡାକ୍ତରଙ୍କୁ ଦେଖାନ୍ତୁ।\n\n"
            "⚠️ ଏହା ସାଧାରଣ ପରାମର୍ଶ। ଲଗାତାର ଲକ୍ଷଣ ପାଇଁ ଚିକିତ୍ସା ସହାୟତା ନିଅନ୍ତୁ।"
        ),
        "headache": (
            "ମୁଣ୍ଡ ବ୍ୟଥା ପାଇଁ:\n\n"
            "1. ଶାନ୍ତ, ଅନ୍ଧାର କୋଠରୀରେ ବିଶ୍ରାମ ନିଅନ୍ତୁ\n"
            "2. ଥଣ୍ଡା କିମ୍ବା ଗରମ ସେକ ଦିଅନ୍ତୁ\n"
            "3. ପାଣି ପିଅନ୍ତୁ\n"
            "4. ସ୍କ୍ରିନରୁ ଦୂରେ ରୁହନ୍ତୁ\n"
            "5. ବେକ ଏବଂ କାନ୍ଧର ହାଲକା ମାଲିସ କରନ୍ତୁ\n\n"
            "ଯଦି ମୁଣ୍ଡ ବ୍ୟଥା ଗମ୍ଭୀର ହୁଏ, ଡାକ୍ତରଙ୍କୁ ଦେଖାନ୍ତୁ।"
        ),
        "cough": (
            "କାଶ ପାଇଁ:\n\n"
            "1. ଗରମ ତରଳ ପଦାର୍ଥ ପିଅନ୍ତୁ\n"
            "2. ମହୁ ଏବଂ ଗରମ ପାଣି ନିଅନ୍ତୁ\n"
            "3. ଧୂଆଁରୁ ଦୂରେ ରୁହନ୍ତୁ\n"
            "4. ବାୟୁରେ ଆର୍ଦ୍ରତା ବଜାୟ ରଖନ୍ତୁ\n"
            "5. ଆୱାଜକୁ ବିଶ୍ରାମ ଦିଅନ୍ତୁ\n\n"
            "ଯଦି କାଶ 2 ସପ୍ତାହରୁ ଅଧିକ ରହେ, ଡାକ୍ତରଙ୍କୁ ଦେଖାନ୍ତୁ।"
        ),
        "default": (
            "ଆପଣଙ୍କ ପ୍ରଶ୍ନ ପାଇଁ ଧନ୍ୟବାଦ। ମୁଁ ସାଧାରଣ ସ୍ୱାସ୍ଥ୍ୟ ପରାମର୍ଶ ପ୍ରଦାନ କରେ। "
            "ସଠିକ୍ ନିରାକରଣ ଏବଂ ଚିକିତ୍ସା ପାଇଁ କୌଣସି ସ୍ୱାସ୍ଥ୍ୟ ପେଶାଦାରଙ୍କ ସହିତ ପରାମର୍ଶ କରନ୍ତୁ।"
        ),
    },
}


class Classification(NamedTuple):
    topic: Optional[str]
    reply: str
    suggested_title: str


def detect_topic(text: str) -> Optional[str]:
    """Return the first topic whose keywords occur in ``text``, or None."""
    lowered = text.lower().strip()
    for topic, keywords in TOPIC_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return topic
    return None


def select_reply(text: str, language: str) -> str:
    """Canned reply for ``text`` in ``language`` (English if unknown)."""
    responses = RESPONSES.get(language, RESPONSES[ChatLanguage.EN.value])
    topic = detect_topic(text)
    return responses.get(topic, responses["default"])


def derive_title(first_message: str) -> str:
    topic = detect_topic(first_message)
    if topic:
        return TOPIC_TITLES[topic]

    words = first_message.split(" ")[:TITLE_WORDS]
    title = " ".join(words)[:TITLE_MAX_LENGTH]
    if len(first_message) > TITLE_MAX_LENGTH:
        title += "..."
    return title


def classify_and_reply(text: str, language: str) -> Classification:
    return Classification(
        topic=detect_topic(text),
        reply=select_reply(text, language),
        suggested_title=derive_title(text),
    )
