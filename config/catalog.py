"""
Static business catalog for the Capital Code assistant.

Services, process steps, guarantees and contact data injected into every
system prompt. Read-only after import.
"""

SERVICES = [
    {
        "title": "Desarrollo Web Personalizado",
        "description": (
            "Creamos sitios web únicos y personalizados que reflejan la identidad de tu marca "
            "y cumplen tus objetivos comerciales"
        ),
    },
    {
        "title": "Desarrollo de Software",
        "description": (
            "Desarrollamos soluciones de software a medida para optimizar tus procesos "
            "empresariales y aumentar la eficiencia"
        ),
    },
    {
        "title": "Aplicaciones Móviles",
        "description": (
            "Diseñamos y desarrollamos aplicaciones móviles intuitivas para iOS y Android "
            "que conectan con tus usuarios"
        ),
    },
    {
        "title": "Consultoría Tecnológica",
        "description": (
            "Asesoramos en la selección e implementación de tecnologías para maximizar "
            "el potencial de tu negocio"
        ),
    },
    {
        "title": "E-commerce",
        "description": "Creamos tiendas en línea robustas y seguras para impulsar tus ventas en el mundo digital",
    },
    {
        "title": "Mantenimiento y Soporte",
        "description": (
            "Ofrecemos soporte continuo y mantenimiento para garantizar el funcionamiento "
            "óptimo de tus sistemas"
        ),
    },
]

PROCESS_STEPS = [
    {"step": "Conectar", "description": "Conecta con nosotros vía reunión"},
    {"step": "Colaborar", "description": "Definimos el alcance del proyecto"},
    {"step": "Crear", "description": "Déjanos el resto a nosotros"},
]

GUARANTEES = [
    {
        "title": "Entrega rápida",
        "description": "Entregamos tus proyectos en 1-2 semanas sin comprometer la calidad.",
    },
    {
        "title": "Diseño y Desarrollo",
        "description": "Diseñamos y desarrollamos tu sitio web con las últimas tecnologías y tendencias.",
    },
    {
        "title": "Escalabilidad + Mantenimiento",
        "description": "Ofrecemos mantenimiento y escalabilidad para todos los sitios web.",
    },
    {
        "title": "Equipo de Expertos",
        "description": "Un equipo de expertos listos para ayudarte en todo momento.",
    },
    {
        "title": "Construcción Segura",
        "description": "Prácticas de desarrollo seguras para asegurarnos de que tus datos estén a salvo.",
    },
    {
        "title": "Seguimiento de Análisis",
        "description": "Sigue tus progresos con nuestro seguimiento de análisis integrado.",
    },
    {
        "title": "Sitios web Dinámicos",
        "description": "Construimos soluciones dinámicas y fáciles de administrar.",
    },
    {
        "title": "Soporte 24/7",
        "description": "Ofrecemos soporte 24/7 para todos nuestros clientes. Llámanos para obtener más información.",
    },
    {
        "title": "Precios Asequibles",
        "description": "Precios asequibles para todos nuestros clientes.",
    },
]

CONTACT_INFO = {
    "whatsapp_numbers": [
        {"country": "Colombia", "number": "573125668800", "flag": "🇨🇴"},
        {"country": "México", "number": "5218991499735", "flag": "🇲🇽"},
    ],
    "email": "capitalcodecol@gmail.com",
    "phone": "+573125668800",
}

# In-app link targets rendered by the widget; never exposed as raw routes.
NAVIGATION_LINKS = {
    "showcase": "/showcase",
    "meeting": "/meeting",
}
