from datetime import datetime, timezone
from typing import List

from green_essays.domains.essays.entities import Essay, EssayStatus, DUMMY_PREFIX
from green_essays.domains.essays.sections import CHALLENGES_AHEAD, PATHWAY_FORWARD, WHERE_WE_ARE_NOW

DUMMY_CONTENT_HTML = "<p>Dummy essay content akan ditampilkan di sini...</p>"

# section -> (slug, title, subtitle, author, cover, reading_time, created)
_SAMPLES = {
    WHERE_WE_ARE_NOW: [
        ("politik-energi-antara-populisme-dan-realisme",
         "Politik Energi: Antara Populisme dan Realisme",
         "Analisis mendalam tentang dinamika politik energi Indonesia dan bagaimana populisme mempengaruhi kebijakan transisi energi yang realistis.",
         "Dr. Politik Hijau", "/lovable-uploads/d49a1a46-b20a-499c-acc1-feff1e9ad4a8.png", 8, "2024-11-15"),
        ("snapshot-energi-global-realitas-vs-ambisi",
         "Snapshot Energi Global: Realitas vs Ambisi",
         "Perbandingan antara target global transisi energi dengan kenyataan implementasi di berbagai negara, termasuk gap yang masih harus diatasi.",
         "Dr. Sari Energi", "/lovable-uploads/2fef84e0-2d64-4a55-a6c7-8e5541784690.png", 10, "2024-11-20"),
        ("infrastruktur-energi-indonesia-tantangan-dan-peluang",
         "Infrastruktur Energi Indonesia: Tantangan dan Peluang",
         "Evaluasi komprehensif kondisi infrastruktur energi Indonesia saat ini dan identifikasi peluang untuk modernisasi dan transisi.",
         "Prof. Hijau Nusantara", "/lovable-uploads/30be2386-86bf-41aa-900b-683e1049cf08.png", 12, "2024-12-01"),
    ],
    CHALLENGES_AHEAD: [
        ("ketergantungan-fossil-fuel-hambatan-utama",
         "Ketergantungan Fossil Fuel: Hambatan Utama",
         "Menganalisis mengapa ketergantungan pada bahan bakar fosil menjadi hambatan terbesar dalam transisi energi dan strategi untuk mengatasinya.",
         "Dr. Politik Hijau", "/lovable-uploads/e4fef01c-e480-414e-8764-4044cb4cc1aa.png", 9, "2024-11-18"),
        ("keadilan-energi-siapa-yang-tertinggal",
         "Keadilan Energi: Siapa yang Tertinggal?",
         "Perspektif tentang aspek keadilan sosial dalam transisi energi dan bagaimana memastikan tidak ada kelompok yang tertinggal.",
         "Dr. Sari Energi", "/lovable-uploads/faf0d242-4524-4b6b-9fd8-c9f4478afc86.png", 11, "2024-11-25"),
        ("geopolitik-transisi-risiko-dan-konflik-baru",
         "Geopolitik Transisi: Risiko dan Konflik Baru",
         "Dampak transisi energi terhadap geopolitik global dan potensi risiko serta konflik baru yang dapat muncul.",
         "Prof. Hijau Nusantara", "/lovable-uploads/d49a1a46-b20a-499c-acc1-feff1e9ad4a8.png", 10, "2024-12-05"),
    ],
    PATHWAY_FORWARD: [
        ("peta-jalan-net-zero-2060-sektor-prioritas",
         "Peta Jalan Net Zero 2060: Sektor Prioritas",
         "Roadmap detail menuju net zero emission 2060 dengan identifikasi sektor-sektor prioritas dan langkah-langkah konkret.",
         "Dr. Politik Hijau", "/lovable-uploads/2fef84e0-2d64-4a55-a6c7-8e5541784690.png", 12, "2024-11-22"),
        ("inovasi-teknologi-energi-dari-ide-ke-implementasi",
         "Inovasi Teknologi Energi: Dari Ide ke Implementasi",
         "Proses transformasi inovasi teknologi energi bersih dari tahap konsep hingga implementasi massal di Indonesia.",
         "Dr. Sari Energi", "/lovable-uploads/30be2386-86bf-41aa-900b-683e1049cf08.png", 9, "2024-11-28"),
        ("peran-finansial-hijau-instrumen-dan-investasi",
         "Peran Finansial Hijau: Instrumen dan Investasi",
         "Eksplorasi berbagai instrumen keuangan hijau dan strategi investasi yang dapat mendukung percepatan transisi energi.",
         "Prof. Hijau Nusantara", "/lovable-uploads/e4fef01c-e480-414e-8764-4044cb4cc1aa.png", 11, "2024-12-03"),
    ],
}


def _build(section: str) -> List[Essay]:
    essays = []
    for index, (slug, title, subtitle, author, cover, reading_time, created) in enumerate(_SAMPLES[section], start=1):
        timestamp = datetime.fromisoformat(created).replace(hour=10, tzinfo=timezone.utc)
        essays.append(Essay(
            id=f"{DUMMY_PREFIX}{index}-{section}",
            slug=slug,
            section=section,
            title=title,
            subtitle=subtitle,
            author_name=author,
            cover_image_url=cover,
            content_html=DUMMY_CONTENT_HTML,
            status=EssayStatus.PUBLISHED,
            version=1,
            reading_time=reading_time,
            created_at=timestamp,
            updated_at=timestamp,
        ))
    return essays


def dummy_essays(section: str) -> List[Essay]:
    """Демонстрационные эссе раздела (новые объекты на каждый вызов)"""
    if section not in _SAMPLES:
        return []
    return _build(section)
