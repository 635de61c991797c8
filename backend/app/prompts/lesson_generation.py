"""Prompt templates for lesson and practice-question generation.

The output-format sections are the contract the response parsers read back:
headings for lessons, ``**Question <n>**`` blocks for questions.
"""

STYLE_INSTRUCTIONS: dict[str, str] = {
    "academic": (
        "Use formal academic language with precise terminology. Include theoretical "
        "background and detailed explanations. Reference established principles and "
        "methodologies."
    ),
    "simplified": (
        "Use clear, simple language that is easy to understand. Break down complex "
        "concepts into smaller parts. Use everyday analogies and practical examples "
        "to illustrate points."
    ),
    "humorous": (
        "Make the content engaging and fun while maintaining educational value. Use "
        "appropriate humor, interesting analogies, and relatable examples. Keep the "
        "tone light but informative."
    ),
}

DEFAULT_STYLE_INSTRUCTION = (
    "Use clear, engaging language appropriate for high school students."
)

DIFFICULTY_INSTRUCTIONS: dict[str, str] = {
    "easy": (
        "Create basic questions that test fundamental understanding and recall of key "
        "concepts. Focus on definitions and simple applications."
    ),
    "medium": (
        "Create questions that require understanding and application of concepts. "
        "Include some analysis and problem-solving elements."
    ),
    "hard": (
        "Create challenging questions that require synthesis, analysis, and critical "
        "thinking. Include complex problem-solving and application to new situations."
    ),
}

DEFAULT_DIFFICULTY_INSTRUCTION = (
    "Create questions appropriate for high school level understanding."
)

LESSON_GENERATION_PROMPT = """You are {tutor_name}, an experienced {tutor_gender} educator. Generate a comprehensive lesson on the following topic:

**Lesson Topic**: {lesson_name}

**Learning Objectives**:
{objectives_list}

**Key Terms**: {keywords}

**Teaching Style**: {style_instructions}

**Requirements**:
1. Create engaging, educational content that covers all learning objectives
2. Use the specified teaching style throughout
3. Include practical examples and analogies where appropriate
4. Structure the content with clear headings and sections
5. End with a brief summary of key points

**Format your response as follows**:

# [Lesson Title]

## Introduction
[Engaging introduction that hooks the student]

## Main Content
[Detailed explanation covering all objectives, broken into logical sections with subheadings]

## Key Points
- [Key point 1]
- [Key point 2]
- [Key point 3]
[Continue as needed]

## Summary
[Brief summary reinforcing the main concepts]

Please ensure the content is appropriate for high school level students and maintains the {style} style throughout."""

QUESTIONS_GENERATION_PROMPT = """You are {tutor_name}, an experienced {tutor_gender} educator. Generate {count} practice questions for the following lesson:

**Lesson Topic**: {lesson_name}
**Learning Objectives**: {objectives}
**Key Terms**: {keywords}
**Difficulty Level**: {difficulty}

**Instructions**:
{difficulty_instructions}

**Tone**: {style_instructions}

**Question Types**:
- Mix of multiple-choice and short-answer questions
- Each multiple-choice question should have 4 options (A, B, C, D)
- Include clear explanations for all answers

**Format your response as follows**:

**Question 1**
Type: multiple-choice
Question: [Your question here]
A) [Option A]
B) [Option B]
C) [Option C]
D) [Option D]
Correct Answer: [Letter]
Explanation: [Detailed explanation of why this answer is correct and others are wrong]

**Question 2**
Type: short-answer
Question: [Your question here]
Correct Answer: [Expected answer]
Explanation: [Explanation of the concept and what makes a good answer]

[Continue for all {count} questions]

Ensure questions test understanding of the learning objectives and use appropriate terminology."""

CONNECTION_TEST_REPLY = "AI service is working correctly"

CONNECTION_TEST_PROMPT = (
    f'Hello, please respond with "{CONNECTION_TEST_REPLY}" to test the connection.'
)
