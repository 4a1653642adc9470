from typing import Iterable, Optional

from green_essays.domains.essays.entities import (
    ActingUser, Essay, EssayKind, EssayStatus, ResolvedEssay, DEFAULT_TITLE,
    classify, seed_content_html, seed_content_json, template_id,
)


def build_template(section: str, slug: str, acting_user: Optional[ActingUser] = None) -> Essay:
    """Несохраняемая заготовка для (section, slug) без записи в хранилище"""
    author = (acting_user or ActingUser.anonymous()).author_name()
    return Essay(
        id=template_id(slug),
        slug=slug,
        section=section,
        title=DEFAULT_TITLE,
        subtitle="",
        author_name=author,
        content_html=seed_content_html(),
        content_json=seed_content_json(),
        status=EssayStatus.DRAFT,
        version=1,
        reading_time=1,
    )


def resolve(
    section: Optional[str],
    slug: Optional[str],
    collection: Iterable[Essay],
    loading: bool,
    acting_user: Optional[ActingUser] = None,
) -> ResolvedEssay:
    """
    Выбор варианта документа для отображения.

    Чистая функция: без побочных эффектов, безопасна для вызова на каждой отрисовке.
    Пока коллекция загружается, заготовка не строится.
    """
    if loading:
        return ResolvedEssay.loading()

    if slug:
        for essay in collection:
            if essay.slug == slug:
                return ResolvedEssay(essay=essay, kind=classify(essay.id))

    # Без раздела маршрута это "не найдено", а не "нужна заготовка"
    if not section or not slug:
        return ResolvedEssay.not_found()

    return ResolvedEssay(
        essay=build_template(section, slug, acting_user),
        kind=EssayKind.TEMPLATE,
    )
