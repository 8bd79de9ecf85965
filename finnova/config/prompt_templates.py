"""
FinNova - Prompt Templates & Answer Constants
===============================================
Centralised prompt management for the dialogue router.  All prompts
and fixed answer texts live here so they can be versioned and reviewed
independently of application logic.

Exports
-------
PERSONA, RAG_PROMPT_TEMPLATE, SUMMARIZATION_PROMPT, TRANSCRIPT_LINE_TEMPLATE,
TAX_ANSWER_TEMPLATE, TAX_OWED_LINE, NO_TAX_LINE,
UPSTREAM_FAILURE_MESSAGE, ROOT_BANNER.
"""

# ══════════════════════════════════════════════════════════════════════
#  PERSONA
# ══════════════════════════════════════════════════════════════════════

PERSONA: str = """ชื่อ: FinNova
คาแรคเตอร์: นักวิเคราะห์การเงินที่พูดให้เข้าใจง่าย ไม่เวิ่น ไม่ใช้ศัพท์ยาก
ถนัดเรื่อง: เงินเดือน ภาษี การเงินส่วนบุคคล งบการเงิน
โทนการพูด: เหมือนเพื่อนที่เก่งเรื่องการเงิน อธิบายตรงๆ ฟังแล้วเข้าใจเลย"""


# ══════════════════════════════════════════════════════════════════════
#  RAG PROMPT TEMPLATE
# ══════════════════════════════════════════════════════════════════════
# Sections, in order: persona, reference information, prior summary,
# question, closing instruction.

RAG_PROMPT_TEMPLATE: str = """{persona}

ข้อมูลอ้างอิง:
{context}

สรุปก่อนหน้า:
{summary}

คำถาม: {question}
ตอบแบบเข้าใจง่าย กระชับ ไม่สอนเป็นตำรา
"""


# ══════════════════════════════════════════════════════════════════════
#  SUMMARIZATION PROMPT (conversation memory)
# ══════════════════════════════════════════════════════════════════════

SUMMARIZATION_PROMPT: str = """สรุปการคุยนี้ 3 บรรทัด:
{conversation}"""

TRANSCRIPT_LINE_TEMPLATE: str = "user: {user}\nassistant: {assistant}"


# ══════════════════════════════════════════════════════════════════════
#  TAX ANSWER
# ══════════════════════════════════════════════════════════════════════

TAX_OWED_LINE: str = "ต้องเสียภาษีจำนวน {tax} บาท"

NO_TAX_LINE: str = "ไม่ต้องเสียภาษี เพราะเงินได้สุทธิไม่ถึงเกณฑ์"

TAX_ANSWER_TEMPLATE: str = """คำนวณให้แล้วครับ 📊

💼 รายได้ & รายจ่าย
- เงินเดือนต่อปี: {annual} บาท
- ค่าใช้จ่ายเหมา (50% ของรายได้ สูงสุด 100,000): {expense} บาท
- ค่าลดหย่อนส่วนบุคคล: {deduction} บาท

🧮 เงินได้สุทธิ
= {annual} - {expense} - {deduction}
= {net} บาท

🎯 ผลลัพธ์ภาษี
{result}

📝 อธิบายเพิ่มเติม:
เงินได้สุทธิ = รายได้ต่อปี - ค่าใช้จ่าย - ค่าลดหย่อน"""


# ══════════════════════════════════════════════════════════════════════
#  TRANSPORT-LEVEL TEXTS
# ══════════════════════════════════════════════════════════════════════

UPSTREAM_FAILURE_MESSAGE: str = "ขออภัย ตอนนี้ไม่สามารถติดต่อผู้ช่วย FinNova ได้ ลองใหม่อีกครั้งในอีกสักครู่"

ROOT_BANNER: str = "FinNova Backend is running 🚀"
