"""Canned assistant replies, as an ordered rule table.

`respond()` walks `RULES` top to bottom and returns the first reply whose
triggers appear in the lower-cased user text and whose form filter matches.
Nothing here touches state; the chat strategy only calls `respond()` and
`wants_to_finish()`.
"""

from dataclasses import dataclass

from asistente.models.catalog import TaxFormType
from asistente.models.enums import FormTypeId

DONE_PHRASES: tuple[str, ...] = (
    "terminar",
    "finalizar",
    "completar",
    "acabar",
    "listo",
    "acabé",
    "terminé",
)

_QUARTERLY = (
    "El {name} es trimestral, con los siguientes plazos:\n"
    "• 1T: Del 1 al 20 de abril\n"
    "• 2T: Del 1 al 20 de julio\n"
    "• 3T: Del 1 al 20 de octubre\n"
    "• 4T: Del 1 al 30 de enero del año siguiente"
)

DEADLINES: dict[FormTypeId, str] = {
    FormTypeId.MODELO_100: (
        "• Inicio: 1 de abril\n"
        "• Finalización: 30 de junio\n\n"
        "Si optas por domiciliación bancaria, el plazo termina el 25 de junio."
    ),
    FormTypeId.MODELO_303: _QUARTERLY.format(name="Modelo 303"),
    FormTypeId.MODELO_349: (
        "El Modelo 349 se presenta del 1 al 20 del mes siguiente a cada periodo "
        "(mensual o trimestral). El del último periodo del año se presenta del 1 al 30 de enero."
    ),
    FormTypeId.MODELO_390: (
        "El Modelo 390 es anual y se presenta del 1 al 30 de enero del año siguiente, "
        "junto con la última autoliquidación del Modelo 303."
    ),
}

SUGGESTED_QUESTIONS: dict[FormTypeId, tuple[str, ...]] = {
    FormTypeId.MODELO_100: (
        "¿Qué es el Modelo 100?",
        "¿Cuáles son las deducciones que puedo aplicar?",
        "¿Necesito incluir ingresos del extranjero?",
        "¿Cómo funcionan las deducciones por vivienda?",
        "¿Puedo deducir gastos de autónomo?",
    ),
    FormTypeId.MODELO_303: (
        "¿Qué es el Modelo 303?",
        "¿Cómo calculo el IVA repercutido?",
        "¿Puedo deducir todo el IVA soportado?",
        "¿Cuál es el plazo de presentación?",
        "¿Qué ocurre si tengo más IVA soportado que repercutido?",
    ),
    FormTypeId.MODELO_349: (
        "¿Qué es el Modelo 349?",
        "¿Quién debe presentar este modelo?",
        "¿Qué operaciones se declaran?",
        "¿Cuál es el plazo de presentación?",
    ),
    FormTypeId.MODELO_390: (
        "¿Qué es el Modelo 390?",
        "¿Quién está exonerado de presentarlo?",
        "¿Cómo se relaciona con el Modelo 303?",
        "¿Cuál es el plazo de presentación?",
    ),
}


@dataclass(frozen=True)
class Rule:
    """Reply for any of *triggers*, optionally limited to some form types."""

    triggers: tuple[str, ...]
    reply: str
    forms: frozenset[FormTypeId] | None = None

    def matches(self, text: str, form_type: FormTypeId) -> bool:
        if self.forms is not None and form_type not in self.forms:
            return False
        return any(trigger in text for trigger in self.triggers)


def _only(*forms: FormTypeId) -> frozenset[FormTypeId]:
    return frozenset(forms)


M100 = _only(FormTypeId.MODELO_100)
M303 = _only(FormTypeId.MODELO_303)
M349 = _only(FormTypeId.MODELO_349)
M390 = _only(FormTypeId.MODELO_390)

DEADLINE_TRIGGERS = ("fecha límite", "plazo")

RULES: tuple[Rule, ...] = (
    # Modelo 100
    Rule(
        ("modelo 100",),
        "El Modelo 100 es la declaración anual del IRPF (Impuesto sobre la Renta de las Personas "
        "Físicas). Este formulario es obligatorio para la mayoría de los contribuyentes en España y "
        "se presenta generalmente entre abril y junio del año siguiente al ejercicio fiscal.",
        M100,
    ),
    Rule(
        ("deducci",),
        "Las deducciones principales en el IRPF incluyen:\n\n"
        "• Deducciones por inversión en vivienda habitual (régimen transitorio)\n"
        "• Deducciones por donativos a entidades sin ánimo de lucro\n"
        "• Deducciones por maternidad\n"
        "• Deducciones por familia numerosa o personas con discapacidad a cargo\n"
        "• Deducciones autonómicas específicas según tu comunidad\n\n"
        "¿Quieres que profundice en alguna de estas deducciones?",
        M100,
    ),
    Rule(
        ("extranjero",),
        "Sí, debes declarar todos tus ingresos mundiales en la declaración de la renta española si "
        "eres residente fiscal en España. Esto incluye salarios, rentas, intereses, dividendos y "
        "ganancias de capital obtenidos en el extranjero. Existen mecanismos para evitar la doble "
        "imposición mediante convenios fiscales entre países.",
        M100,
    ),
    Rule(
        ("vivienda",),
        "Las deducciones por vivienda habitual han cambiado significativamente. Desde 2013, solo "
        "pueden aplicarla quienes compraron su vivienda habitual antes del 1 de enero de 2013. La "
        "deducción es del 15% sobre un máximo de 9.040€ anuales. Si estás pagando una hipoteca "
        "anterior a esa fecha, puedes seguir beneficiándote de esta deducción.",
        M100,
    ),
    Rule(
        ("autónomo", "autonomo"),
        "Los autónomos pueden deducir los gastos relacionados directamente con la actividad "
        "económica, como:\n\n"
        "• Suministros de la parte de la vivienda afecta a la actividad\n"
        "• Material de oficina\n"
        "• Cuotas de autónomos a la Seguridad Social\n"
        "• Gastos de vehículo (con restricciones)\n"
        "• Seguros profesionales\n\n"
        "Recuerda que estos gastos deben estar vinculados a la actividad económica y estar "
        "debidamente justificados con facturas.",
        M100,
    ),
    # Modelo 303
    Rule(
        ("modelo 303",),
        "El Modelo 303 es la declaración trimestral del IVA (Impuesto sobre el Valor Añadido) que "
        "deben presentar empresarios, profesionales y autónomos. En él se declaran las operaciones "
        "realizadas en el trimestre, tanto el IVA repercutido (cobrado a clientes) como el IVA "
        "soportado (pagado a proveedores).",
        M303,
    ),
    Rule(
        ("iva", "repercutido"),
        "El IVA repercutido es el que cobras a tus clientes en tus facturas. Dependiendo del tipo "
        "de bienes o servicios, puede ser del:\n\n"
        "• 21% (tipo general)\n"
        "• 10% (tipo reducido)\n"
        "• 4% (tipo superreducido)\n\n"
        "Este IVA repercutido debe declararse en el Modelo 303 y pagarse a Hacienda, salvo la parte "
        "que puedas compensar con el IVA soportado.",
        M303,
    ),
    Rule(
        ("soportado", "deducir"),
        "El IVA soportado es el que has pagado a tus proveedores. Para poder deducirlo en tu "
        "Modelo 303 debe cumplir varios requisitos:\n\n"
        "• Debe corresponder a bienes o servicios afectos a tu actividad económica\n"
        "• Debe estar documentado en facturas completas y correctas\n"
        "• Debe estar contabilizado y registrado en los libros\n"
        "• No debe estar excluido del derecho a deducción (como gastos de representación o "
        "vehículos no afectos al 100%)\n\n"
        "¿Necesitas más información sobre algún aspecto específico?",
        M303,
    ),
    # Modelo 349
    Rule(
        ("modelo 349", "intracomunitari"),
        "El Modelo 349 es la declaración recapitulativa de operaciones intracomunitarias. En él se "
        "informa de las entregas y adquisiciones de bienes y de las prestaciones de servicios "
        "realizadas con empresarios de otros Estados miembros de la Unión Europea.",
        M349,
    ),
    Rule(
        ("quién", "quien", "obligado"),
        "Deben presentar el Modelo 349 los empresarios y profesionales que realicen operaciones "
        "intracomunitarias, incluidos los inscritos en el Registro de Operadores Intracomunitarios "
        "(ROI). Los datos del NIF-IVA de cada cliente o proveedor deben ser válidos en VIES.",
        M349,
    ),
    Rule(
        ("operaciones", "declar"),
        "En el Modelo 349 se declaran, agrupadas por operador y clave:\n\n"
        "• Entregas intracomunitarias de bienes (clave E)\n"
        "• Adquisiciones intracomunitarias de bienes (clave A)\n"
        "• Prestaciones de servicios (clave S)\n"
        "• Adquisiciones de servicios (clave I)\n\n"
        "Las rectificaciones de periodos anteriores se incluyen en un apartado propio.",
        M349,
    ),
    # Modelo 390
    Rule(
        ("modelo 390", "resumen anual"),
        "El Modelo 390 es la declaración-resumen anual del IVA. Recoge el total de las operaciones "
        "declaradas durante el año en los Modelos 303 y no supone un ingreso adicional: es "
        "informativa.",
        M390,
    ),
    Rule(
        ("exoner", "exento", "obligado"),
        "Están exonerados del Modelo 390 los contribuyentes que tributan solo en régimen simplificado "
        "o que realizan exclusivamente arrendamientos de inmuebles urbanos, y quienes están "
        "obligados al Suministro Inmediato de Información (SII).",
        M390,
    ),
    Rule(
        ("303", "relaci"),
        "El Modelo 390 debe cuadrar con la suma de los Modelos 303 del ejercicio: la base imponible, "
        "el IVA repercutido y el IVA soportado anuales han de coincidir con lo declarado en cada "
        "trimestre.",
        M390,
    ),
    # Any form
    Rule(
        DONE_PHRASES,
        "¡Excelente! Parece que ya has completado la información necesaria para tu declaración. "
        "Puedes continuar con el siguiente paso del proceso usando el botón 'Completar Asistente' que "
        "aparece abajo. ¿Hay algo más en lo que pueda ayudarte antes de finalizar?",
    ),
)


def greeting(form: TaxFormType) -> str:
    return (
        "👋 ¡Hola! Soy tu asistente fiscal. Estoy aquí para ayudarte a completar tu "
        f"declaración de {form.display_name}. ¿En qué puedo ayudarte?"
    )


def deadline_reply(form: TaxFormType) -> str:
    return (
        f"Los plazos para presentar el {form.display_name} son:\n\n"
        f"{DEADLINES[form.id]}\n\n"
        "Te recomiendo no dejarlo para el último momento para evitar problemas técnicos "
        "o dudas de última hora."
    )


def fallback_reply(user_text: str, form: TaxFormType) -> str:
    return (
        f'Entiendo tu consulta sobre "{user_text}". Esta es un área importante para tu '
        f"declaración de {form.display_name}. ¿Podrías proporcionar más detalles para que pueda "
        "darte información más precisa? Si tienes dudas específicas sobre deducciones, plazos o "
        "cualquier otro aspecto fiscal, estaré encantado de ayudarte."
    )


def respond(user_text: str, form: TaxFormType) -> str:
    """Pick the canned reply for *user_text*.

    Deadline questions win for every form, then the form's own rules, then
    the completion reply, then an echo of the question.
    """
    text = user_text.lower()
    if any(trigger in text for trigger in DEADLINE_TRIGGERS):
        return deadline_reply(form)
    for rule in RULES:
        if rule.matches(text, form.id):
            return rule.reply
    return fallback_reply(user_text, form)


def wants_to_finish(user_text: str) -> bool:
    text = user_text.lower()
    return any(phrase in text for phrase in DONE_PHRASES)
