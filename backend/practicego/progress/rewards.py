# Points the app awards per completed activity. The streak bonus is added on top by the facade.
DAILY_LESSON = 15
LESSON_FINISHED = 20
CHAT_TURN = 5
SPEAKING_SCENARIO = 25
PRONUNCIATION = 20
DICTATION = 15
READING = 15
VOCABULARY_REVIEW = 10
EXERCISES = 10
LISTENING_QUIZ = 10
ESSENTIAL_VERBS = 10
WORD_CORRECTIONS = 0

PRONUNCIATION_PASS_SCORE = 80
